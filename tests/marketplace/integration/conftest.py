import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.api import ALL_ROUTERS, register_marketplace_exception_handlers


@pytest.fixture()
def app():
    app = FastAPI()
    for router in ALL_ROUTERS:
        app.include_router(router)
    register_marketplace_exception_handlers(app)
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)
