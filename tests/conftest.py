import base64

import pytest
from fastapi.testclient import TestClient

from chat_trigger.main import app
from chat_trigger.trigger.credentials import StaticCredentialProvider
from chat_trigger.trigger.dispatcher import RequestDispatcher
from chat_trigger.trigger.settings import ChatConfiguration


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def basic_auth(username: str, password: str) -> str:
    return "Basic " + b64(f"{username}:{password}".encode())


@pytest.fixture
def config():
    return ChatConfiguration()


@pytest.fixture
def dispatcher():
    return RequestDispatcher(StaticCredentialProvider("alice", "s3cret"))


@pytest.fixture
def make_client():
    """Start the app with the given trigger parameters."""
    clients = []

    def _make(parameters: dict | None = None) -> TestClient:
        client = TestClient(app)
        client.__enter__()
        app.state.parameters = parameters or {}
        app.state.dispatcher = RequestDispatcher(StaticCredentialProvider("alice", "s3cret"))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)
