"""Shared fixtures: users, in-memory store, buses with every chat handler registered."""

import uuid
from typing import Tuple

import pytest

import unistay.chat.command_handlers  # noqa: F401
import unistay.chat.query_handlers  # noqa: F401
from unistay.chat.commands import CreateChatCommand, AddMemberCommand
from unistay.chat.enums import ChatMemberRole
from unistay.chat.read_models import UserSummary
from unistay.infra.cqrs.command_bus import CommandBus
from unistay.infra.cqrs.query_bus import QueryBus
from unistay.infra.cqrs.decorators import auto_register_all_handlers
from unistay.infra.cqrs.handler_dependencies import HandlerDependencies
from unistay.infra.repos.memory_chat_store import InMemoryChatStore
from unistay.infra.repos.user_directory import InMemoryUserDirectory

from tests.fakes.fake_chat_notifier import FakeChatNotifier


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def _user(first_name: str, last_name: str) -> UserSummary:
    return UserSummary(
        id=uuid.uuid4(),
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}@unistay.test",
    )


@pytest.fixture
def alice() -> UserSummary:
    return _user("Alice", "Moreau")


@pytest.fixture
def bob() -> UserSummary:
    return _user("Bob", "Keller")


@pytest.fixture
def carol() -> UserSummary:
    return _user("Carol", "Nguyen")


@pytest.fixture
def dave() -> UserSummary:
    return _user("Dave", "Okafor")


@pytest.fixture
def user_directory(alice, bob, carol, dave) -> InMemoryUserDirectory:
    return InMemoryUserDirectory([alice, bob, carol, dave])


@pytest.fixture
def chat_store() -> InMemoryChatStore:
    return InMemoryChatStore()


@pytest.fixture
def notifier() -> FakeChatNotifier:
    return FakeChatNotifier()


@pytest.fixture
def deps(chat_store, user_directory, notifier) -> HandlerDependencies:
    return HandlerDependencies(
        chat_store=chat_store,
        user_directory=user_directory,
        chat_notifier=notifier,
    )


@pytest.fixture
def buses(deps) -> Tuple[CommandBus, QueryBus]:
    command_bus = CommandBus()
    query_bus = QueryBus()
    auto_register_all_handlers(command_bus, query_bus, deps)
    return command_bus, query_bus


@pytest.fixture
def command_bus(buses) -> CommandBus:
    return buses[0]


@pytest.fixture
def query_bus(buses) -> QueryBus:
    return buses[1]


@pytest.fixture
def make_chat(command_bus):
    """Create a chat owned by ``owner`` and add ``members`` as plain Members."""

    async def _make_chat(owner: UserSummary, *members: UserSummary, name: str = "Study Group"):
        chat = (await command_bus.send(CreateChatCommand(name=name, creator_id=owner.id))).unwrap()
        for member in members:
            (await command_bus.send(AddMemberCommand(
                chat_id=chat.id,
                requestor_id=owner.id,
                target_user_id=member.id,
                role=ChatMemberRole.MEMBER,
            ))).unwrap()
        return chat

    return _make_chat
