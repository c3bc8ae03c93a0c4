# unistay/common/base/base_query_handler.py
"""
Base Query Handler

Provides common infrastructure for all query handlers in UniStay.

Queries are READ-ONLY. Like commands they answer with a Result: lookups
raise domain errors (not found, not a member) which become ``Err``;
store failures are logged and reported through ``operation_failed``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, TYPE_CHECKING

from unistay.common.exceptions.exceptions import (
    UniStayException,
    InfrastructureError,
    OperationFailedError,
)
from unistay.common.result import Ok, Err, Result

if TYPE_CHECKING:
    from unistay.infra.cqrs.handler_dependencies import HandlerDependencies

log = logging.getLogger("unistay.base_query_handler")

TQuery = TypeVar('TQuery')
TResult = TypeVar('TResult')


class BaseQueryHandler(ABC, Generic[TQuery, TResult]):
    """
    Base class for all query handlers in UniStay.

    Usage:
        @query_handler(GetChatMembersQuery)
        class GetChatMembersQueryHandler(BaseQueryHandler[GetChatMembersQuery, List[ChatMemberView]]):
            async def fetch(self, query): ...
    """

    def __init__(self, deps: 'HandlerDependencies'):
        self.chat_store = deps.chat_store
        self.user_directory = deps.user_directory

    async def handle(self, query: TQuery) -> Result[TResult, UniStayException]:
        try:
            return Ok(await self.fetch(query))
        except (InfrastructureError, OSError, asyncio.TimeoutError) as e:
            log.error(f"{type(self).__name__} failed on infrastructure error: {e}", exc_info=True)
            failure = self.operation_failed(query)
            failure.__cause__ = e
            return Err(failure)
        except UniStayException as e:
            return Err(e)

    @abstractmethod
    async def fetch(self, query: TQuery) -> TResult:
        pass

    @abstractmethod
    def operation_failed(self, query: TQuery) -> OperationFailedError:
        pass
