# unistay/infra/cqrs/command_bus.py
# =============================================================================
# File: unistay/infra/cqrs/command_bus.py
# Description: Command Bus with middleware pipeline
# Commands are Pydantic v2 models, handlers return Result values
# =============================================================================

import logging
from typing import Dict, Type, Any, Optional, List, Callable, Awaitable
from abc import ABC, abstractmethod
import uuid

from pydantic import BaseModel, ConfigDict

from unistay.common.result import Err

log = logging.getLogger("unistay.cqrs.command")


# =============================================================================
# Base Classes
# =============================================================================

class Command(BaseModel):
    """Base class for all commands using Pydantic v2"""
    model_config = ConfigDict(frozen=True)

    correlation_id: Optional[uuid.UUID] = None


class ICommandHandler(ABC):
    """Base class for all command handlers"""

    @abstractmethod
    async def handle(self, command: Command) -> Any:
        """Handle the command and return result"""
        pass


# =============================================================================
# Middleware Support
# =============================================================================

class Middleware(ABC):
    """Base middleware class for commands"""

    @abstractmethod
    async def process(
            self,
            message: Any,
            next_handler: Callable[[Any], Awaitable[Any]]
    ) -> Any:
        """Process message and call next handler"""
        pass


class LoggingMiddleware(Middleware):
    """Logs all commands with their outcome"""

    async def process(self, message: Any, next_handler: Callable) -> Any:
        message_type = type(message).__name__
        correlation_id = getattr(message, 'correlation_id', None)
        suffix = f" [correlation: {correlation_id}]" if correlation_id else ""

        log.info(f"Processing command {message_type}{suffix}")

        try:
            result = await next_handler(message)
        except Exception as e:
            log.error(f"Failed to process command {message_type}{suffix}: {e}")
            raise

        if isinstance(result, Err):
            log.info(f"Command {message_type} rejected{suffix}: {result.error}")
        else:
            log.info(f"Successfully processed command {message_type}{suffix}")
        return result


class ValidationMiddleware(Middleware):
    """Validates commands"""

    async def process(self, message: Any, next_handler: Callable) -> Any:
        # Pydantic v2 models are validated during construction
        if not isinstance(message, BaseModel):
            log.warning(f"Command {type(message).__name__} is not a Pydantic model")

        correlation_id = getattr(message, 'correlation_id', None)
        if correlation_id is not None and not isinstance(correlation_id, uuid.UUID):
            raise ValueError(f"Invalid correlation_id type: {type(correlation_id)}")

        return await next_handler(message)


# =============================================================================
# Command Bus Implementation
# =============================================================================

class CommandBus:
    """
    Command Bus with middleware pipeline.
    Each command type has exactly one handler; handlers are created lazily
    from their factories and cached.
    """

    def __init__(self):
        self._handlers: Dict[Type[Command], ICommandHandler] = {}
        self._handler_factories: Dict[Type[Command], Callable[[], ICommandHandler]] = {}
        self._middleware: List[Middleware] = []

        # Default middleware
        self.use(LoggingMiddleware())
        self.use(ValidationMiddleware())

    def use(self, middleware: Middleware) -> 'CommandBus':
        """Add middleware to the pipeline"""
        self._middleware.append(middleware)
        return self

    def register_handler(
            self,
            command_type: Type[Command],
            handler_factory: Callable[[], ICommandHandler]
    ) -> None:
        """
        Register a handler factory for a command type.
        Raises ValueError if a different handler is already registered.
        """
        existing_factory = self._handler_factories.get(command_type)
        if existing_factory is not None and existing_factory != handler_factory:
            raise ValueError(
                f"Duplicate command handler: Command '{command_type.__name__}' already has a registered handler. "
                f"Existing: {existing_factory}, Attempted: {handler_factory}"
            )
        self._handler_factories[command_type] = handler_factory
        self._handlers.pop(command_type, None)
        log.debug(f"Registered handler for {command_type.__name__}")

    async def send(self, command: Command) -> Any:
        """
        Send a command through the middleware pipeline to its handler.
        This is the main entry point for command execution.
        """
        handler = self._build_handler_chain(command)
        return await handler(command)

    def _build_handler_chain(self, command: Command) -> Callable:
        """Build the middleware chain ending with the actual handler"""
        command_type = type(command)

        if command_type not in self._handlers:
            factory = self._handler_factories.get(command_type)
            if not factory:
                registered = sorted(t.__name__ for t in self._handler_factories)
                raise ValueError(
                    f"No handler registered for {command_type.__name__}. "
                    f"Registered handlers: {registered}"
                )
            self._handlers[command_type] = factory()

        final_handler = self._handlers[command_type]

        async def handler_wrapper(cmd):
            return await final_handler.handle(cmd)

        chain = handler_wrapper

        for middleware in reversed(self._middleware):
            current_chain = chain

            async def wrapped(cmd, mw=middleware, next_h=current_chain):
                return await mw.process(cmd, next_h)

            chain = wrapped

        return chain

    def get_handler_info(self) -> Dict[str, Any]:
        """Get information about registered handlers"""
        return {
            "handlers": sorted(t.__name__ for t in self._handler_factories),
            "total_handlers": len(self._handler_factories),
            "middleware_count": len(self._middleware)
        }

# =============================================================================
# EOF
# =============================================================================
