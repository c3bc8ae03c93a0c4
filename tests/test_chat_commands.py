"""Field limits enforced when commands are constructed."""

import uuid

import pytest
from pydantic import ValidationError

from unistay.chat.commands import (
    CHAT_NAME_MAX_LENGTH,
    MESSAGE_CONTENT_MAX_LENGTH,
    CreateChatCommand,
    SendMessageCommand,
    EditMessageCommand,
)


def test_message_content_limit_is_2000() -> None:
    assert MESSAGE_CONTENT_MAX_LENGTH == 2000


def test_send_accepts_content_at_limit() -> None:
    command = SendMessageCommand(chat_id=uuid.uuid4(), sender_id=uuid.uuid4(), content="x" * 2000)

    assert len(command.content) == 2000


def test_send_rejects_content_over_limit() -> None:
    with pytest.raises(ValidationError):
        SendMessageCommand(chat_id=uuid.uuid4(), sender_id=uuid.uuid4(), content="x" * 2001)


def test_edit_rejects_content_over_limit() -> None:
    with pytest.raises(ValidationError):
        EditMessageCommand(
            chat_id=uuid.uuid4(),
            message_id=uuid.uuid4(),
            requesting_user_id=uuid.uuid4(),
            content="x" * 2001,
        )


def test_edit_rejects_blank_content() -> None:
    with pytest.raises(ValidationError):
        EditMessageCommand(
            chat_id=uuid.uuid4(),
            message_id=uuid.uuid4(),
            requesting_user_id=uuid.uuid4(),
            content=" \n ",
        )


def test_chat_name_limit() -> None:
    CreateChatCommand(name="n" * CHAT_NAME_MAX_LENGTH, creator_id=uuid.uuid4())

    with pytest.raises(ValidationError):
        CreateChatCommand(name="n" * (CHAT_NAME_MAX_LENGTH + 1), creator_id=uuid.uuid4())
