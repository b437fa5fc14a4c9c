"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@then(parsers.cfparse('the action fails with "{kind}"'))
def action_fails_with(error, kind):
    assert error["exc"] is not None, "Expected an error but none was raised"
    assert isinstance(error["exc"], ValidationError)
    assert getattr(error["exc"], "kind", type(error["exc"]).__name__) == kind


@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
