# =============================================================================
# File: tests/fakes/fake_chat_notifier.py
# Description: Fake implementation of ChatNotifierPort for unit testing
# Pattern: Ports & Adapters - Fake/Stub adapter
# =============================================================================

from __future__ import annotations

import uuid
from typing import List, Dict, Any
from dataclasses import dataclass

from unistay.chat.entities import ChatMessage


@dataclass
class CallRecord:
    """Record of a method call for verification."""
    method: str
    args: tuple
    kwargs: Dict[str, Any]


class FakeChatNotifier:
    """
    Fake implementation of ChatNotifierPort for unit testing.

    Records every notification instead of broadcasting it.

    Usage:
        notifier = FakeChatNotifier()
        deps = HandlerDependencies(chat_store=store, user_directory=users, chat_notifier=notifier)

        # Run a handler, then verify
        assert notifier.was_called("notify_new_message")
        assert notifier.methods() == ["notify_new_message"]
    """

    def __init__(self):
        self._calls: List[CallRecord] = []

    def _record(self, method: str, *args, **kwargs) -> None:
        self._calls.append(CallRecord(method=method, args=args, kwargs=kwargs))

    # =========================================================================
    # ChatNotifierPort
    # =========================================================================

    async def notify_new_message(self, message: ChatMessage) -> None:
        self._record("notify_new_message", message)

    async def notify_message_edited(self, message: ChatMessage) -> None:
        self._record("notify_message_edited", message)

    async def notify_message_deleted(self, chat_id: uuid.UUID, message_id: uuid.UUID) -> None:
        self._record("notify_message_deleted", chat_id, message_id)

    async def notify_user_joined(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self._record("notify_user_joined", chat_id, user_id)

    async def notify_user_left(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self._record("notify_user_left", chat_id, user_id)

    # =========================================================================
    # Verification Methods
    # =========================================================================

    def was_called(self, method: str) -> bool:
        return any(call.method == method for call in self._calls)

    def get_calls(self, method: str) -> List[CallRecord]:
        return [call for call in self._calls if call.method == method]

    def methods(self) -> List[str]:
        return [call.method for call in self._calls]

    def clear(self) -> None:
        self._calls.clear()
