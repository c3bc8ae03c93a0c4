"""
Handler Dependencies - UniStay Chat Service

Common dependencies container for all command and query handlers.

Architecture: Ports & Adapters (Hexagonal Architecture)
- Ports are defined in domain: unistay/chat/ports/
- Adapters implement ports: unistay/infra/repos/, unistay/realtime/
- Dependencies inject port types, not concrete adapters
"""

from typing import Optional, TYPE_CHECKING
from dataclasses import dataclass

if TYPE_CHECKING:
    from unistay.chat.ports.chat_store_port import ChatStorePort
    from unistay.chat.ports.user_directory_port import UserDirectoryPort
    from unistay.chat.ports.chat_notifier_port import ChatNotifierPort


@dataclass
class HandlerDependencies:
    """
    Container for all handler dependencies.

    Dependencies are injected from application startup (see
    unistay/core/lifespan.py) or built directly in tests with the
    in-memory store and fakes.
    """

    chat_store: 'ChatStorePort'
    user_directory: 'UserDirectoryPort'

    # Realtime fan-out; None disables notifications (e.g. batch tools)
    chat_notifier: Optional['ChatNotifierPort'] = None

