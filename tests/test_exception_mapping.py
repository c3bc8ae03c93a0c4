"""Tests for domain error to HTTP status mapping."""

import uuid

import httpx
import pytest
from fastapi import FastAPI

from unistay.chat.exceptions import (
    ChatNotFoundError,
    ChatMessageNotFoundError,
    ChatInactiveError,
    ChatOperationFailedError,
    ChatMessageOperationFailedError,
    InsufficientPermissionsError,
    UserAlreadyMemberError,
    UserNotMemberError,
)
from unistay.common.exceptions.exceptions import InfrastructureError
from unistay.core.exceptions import setup_exception_handlers, status_for, GENERIC_ERROR_MESSAGE

pytestmark = pytest.mark.anyio

CHAT_ID = uuid.uuid4()
USER_ID = uuid.uuid4()


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ChatNotFoundError(CHAT_ID), 404),
        (ChatMessageNotFoundError(CHAT_ID), 404),
        (UserNotMemberError(USER_ID, CHAT_ID), 403),
        (InsufficientPermissionsError(USER_ID, CHAT_ID, "delete chat"), 403),
        (UserAlreadyMemberError(USER_ID, CHAT_ID), 400),
        (ChatInactiveError(CHAT_ID), 400),
        (ChatOperationFailedError(CHAT_ID, "add member"), 500),
        (ChatMessageOperationFailedError(CHAT_ID, "edit message"), 500),
        (InfrastructureError("pool exhausted"), 500),
    ],
)
def test_status_for(error, status_code) -> None:
    assert status_for(error) == status_code


def test_messages_name_the_ids() -> None:
    assert str(ChatNotFoundError(CHAT_ID)) == f"Chat with ID {CHAT_ID} was not found."
    assert str(InsufficientPermissionsError(USER_ID, CHAT_ID, "add members")) == (
        f"User {USER_ID} does not have permission to add members in chat {CHAT_ID}."
    )


@pytest.fixture
async def client():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/forbidden")
    async def forbidden():
        raise InsufficientPermissionsError(USER_ID, CHAT_ID, "update chat")

    @app.get("/failed")
    async def failed():
        raise ChatOperationFailedError(CHAT_ID, "send message", "relation chat_messages does not exist")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret stack detail")

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_domain_error_body(client) -> None:
    response = await client.get("/forbidden")

    assert response.status_code == 403
    assert response.json() == {
        "error": {
            "code": "insufficient_permissions",
            "message": f"User {USER_ID} does not have permission to update chat in chat {CHAT_ID}.",
        }
    }


async def test_operation_failure_hides_details(client) -> None:
    response = await client.get("/failed")

    assert response.status_code == 500
    assert response.json()["error"]["message"] == GENERIC_ERROR_MESSAGE
    assert "chat_messages" not in response.text


async def test_unhandled_exception_is_generic(client) -> None:
    response = await client.get("/crash")

    assert response.status_code == 500
    assert response.json()["error"]["message"] == GENERIC_ERROR_MESSAGE
    assert "secret" not in response.text
