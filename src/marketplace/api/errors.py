"""HTTP status mapping for marketplace error kinds.

Protean's ``register_exception_handlers`` covers the generic cases
(``ValidationError`` → 400, ``ObjectNotFoundError`` → 404). The handlers
here are more specific, so Starlette picks them first for our own kinds.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import (
    MarketplaceError,
    OrderAlreadyTerminal,
    RiderNotEligible,
    TaskAlreadyClaimed,
    UnauthorizedActor,
)

STATUS_BY_KIND: dict[type, int] = {
    MarketplaceError: 400,
    UnauthorizedActor: 403,
    RiderNotEligible: 403,
    TaskAlreadyClaimed: 409,
    OrderAlreadyTerminal: 409,
}


def _marketplace_error_handler(status_code: int):
    async def handler(request: Request, exc: MarketplaceError) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": exc.messages, "kind": exc.kind})

    return handler


async def _version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": {"_entity": [str(exc)]}, "kind": "ConcurrentModification"},
    )


def register_marketplace_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for error_cls, status_code in STATUS_BY_KIND.items():
        app.add_exception_handler(error_cls, _marketplace_error_handler(status_code))
    app.add_exception_handler(ExpectedVersionError, _version_conflict_handler)
