# =============================================================================
# File: unistay/infra/cqrs/query_bus.py
# Description: Query Bus for read operations
# Queries are frozen Pydantic v2 models, handlers return Result values
# =============================================================================

import logging
from typing import Dict, Type, Any, Callable, Awaitable, List, Optional, TypeVar
from abc import ABC, abstractmethod
import uuid

from pydantic import BaseModel, ConfigDict

from unistay.common.result import Err

log = logging.getLogger("unistay.cqrs.query")

TQuery = TypeVar('TQuery', bound='Query')
TResult = TypeVar('TResult')


# =============================================================================
# Base Classes
# =============================================================================

class Query(BaseModel):
    """Base class for all queries"""
    model_config = ConfigDict(frozen=True)

    correlation_id: Optional[uuid.UUID] = None


class IQueryHandler(ABC):
    """Base class for all query handlers"""

    @abstractmethod
    async def handle(self, query: Query) -> Any:
        pass


# =============================================================================
# Middleware
# =============================================================================

class QueryMiddleware(ABC):
    """Wraps query execution; call next_handler to continue the chain"""

    @abstractmethod
    async def process(
            self,
            query: Any,
            next_handler: Callable[[Any], Awaitable[Any]]
    ) -> Any:
        pass


class QueryLoggingMiddleware(QueryMiddleware):
    """Debug-level trace of reads; rejected reads are common (non-members)"""

    async def process(self, query: Any, next_handler: Callable) -> Any:
        query_type = type(query).__name__
        log.debug(f"Processing query {query_type}")

        try:
            result = await next_handler(query)
        except Exception as e:
            log.error(f"Query {query_type} failed: {e}")
            raise

        if isinstance(result, Err):
            log.debug(f"Query {query_type} rejected: {result.error}")
        return result


# =============================================================================
# Query Bus
# =============================================================================

class QueryBus:
    """
    Dispatches a query to its single registered handler.

    Same lifecycle as CommandBus: factories are registered at startup and
    each handler is built on first use.
    """

    def __init__(self):
        self._handlers: Dict[Type[Query], IQueryHandler] = {}
        self._handler_factories: Dict[Type[Query], Callable[[], IQueryHandler]] = {}
        self._middleware: List[QueryMiddleware] = []

        self.use(QueryLoggingMiddleware())

    def use(self, middleware: QueryMiddleware) -> 'QueryBus':
        self._middleware.append(middleware)
        return self

    def register_handler(
            self,
            query_type: Type[Query],
            handler_factory: Callable[[], IQueryHandler]
    ) -> None:
        existing_factory = self._handler_factories.get(query_type)
        if existing_factory is not None and existing_factory != handler_factory:
            raise ValueError(
                f"Duplicate query handler: Query '{query_type.__name__}' already has a registered handler"
            )
        self._handler_factories[query_type] = handler_factory
        self._handlers.pop(query_type, None)
        log.debug(f"Registered query handler for {query_type.__name__}")

    async def query(self, query: TQuery) -> TResult:
        """Run the query through the middleware chain"""
        handler = self._resolve(type(query))

        async def call(q):
            return await handler.handle(q)

        chain = call
        for middleware in reversed(self._middleware):
            async def wrapped(q, mw=middleware, next_h=chain):
                return await mw.process(q, next_h)

            chain = wrapped

        return await chain(query)

    def _resolve(self, query_type: Type[Query]) -> IQueryHandler:
        handler = self._handlers.get(query_type)
        if handler is None:
            factory = self._handler_factories.get(query_type)
            if not factory:
                registered = sorted(t.__name__ for t in self._handler_factories)
                raise ValueError(
                    f"No handler registered for query {query_type.__name__}. "
                    f"Registered handlers: {registered}"
                )
            handler = self._handlers[query_type] = factory()
        return handler

    def get_handler_info(self) -> Dict[str, Any]:
        return {
            "handlers": sorted(t.__name__ for t in self._handler_factories),
            "total_handlers": len(self._handler_factories),
        }

# =============================================================================
# EOF
# =============================================================================
