# unistay/infra/cqrs/decorators.py
"""
Auto-registration decorators for CQRS handlers
Provides automatic handler discovery and registration
"""
from typing import Type, Dict, Any, List
import logging

log = logging.getLogger("unistay.cqrs.decorators")

# Global registries for handlers
_COMMAND_HANDLERS: Dict[Type, Type] = {}
_QUERY_HANDLERS: Dict[Type, Type] = {}


def command_handler(command_type: Type):
    """
    Decorator for command handler auto-registration

    Usage:
        @command_handler(SendMessageCommand)
        class SendMessageHandler(BaseCommandHandler):
            def __init__(self, deps):
                super().__init__(deps)

            async def execute(self, command: SendMessageCommand):
                ...
    """

    def decorator(handler_class: Type):
        existing_handler = _COMMAND_HANDLERS.get(command_type)
        if existing_handler is not None and existing_handler is not handler_class:
            raise ValueError(
                f"Duplicate command handler: {command_type.__name__} already handled by "
                f"{existing_handler.__name__} in {existing_handler.__module__}"
            )

        _COMMAND_HANDLERS[command_type] = handler_class
        handler_class._command_type = command_type
        handler_class._handler_type = 'command'

        log.debug(
            f"Auto-registered command handler: {handler_class.__name__} "
            f"for {command_type.__name__} in {handler_class.__module__}"
        )
        return handler_class

    return decorator


def query_handler(query_type: Type):
    """
    Decorator for query handler auto-registration

    Usage:
        @query_handler(GetChatMembersQuery)
        class GetChatMembersQueryHandler(BaseQueryHandler):
            ...
    """

    def decorator(handler_class: Type):
        existing_handler = _QUERY_HANDLERS.get(query_type)
        if existing_handler is not None and existing_handler is not handler_class:
            raise ValueError(
                f"Duplicate query handler: {query_type.__name__} already handled by "
                f"{existing_handler.__name__} in {existing_handler.__module__}"
            )

        _QUERY_HANDLERS[query_type] = handler_class
        handler_class._query_type = query_type
        handler_class._handler_type = 'query'

        log.debug(
            f"Auto-registered query handler: {handler_class.__name__} "
            f"for {query_type.__name__} in {handler_class.__module__}"
        )
        return handler_class

    return decorator


def auto_register_all_handlers(command_bus, query_bus, dependencies) -> Dict[str, Any]:
    """
    Register all decorated handlers with their buses

    Args:
        command_bus: The command bus instance
        query_bus: The query bus instance
        dependencies: HandlerDependencies instance with all services

    Returns:
        Statistics about registered handlers
    """

    # Closure per handler class so each factory captures its own class
    def make_factory(h_class, deps):
        def factory():
            return h_class(deps)

        return factory

    for command_type, handler_class in _COMMAND_HANDLERS.items():
        command_bus.register_handler(command_type, make_factory(handler_class, dependencies))
        log.debug(f"Registered {handler_class.__name__} for {command_type.__name__}")

    for query_type, handler_class in _QUERY_HANDLERS.items():
        query_bus.register_handler(query_type, make_factory(handler_class, dependencies))
        log.debug(f"Registered {handler_class.__name__} for {query_type.__name__}")

    log.info(
        f"Auto-registration complete: {len(_COMMAND_HANDLERS)} commands, "
        f"{len(_QUERY_HANDLERS)} queries"
    )

    return {
        'commands': len(_COMMAND_HANDLERS),
        'queries': len(_QUERY_HANDLERS),
    }


def get_registered_handlers() -> Dict[str, List[str]]:
    """Names of all discovered handlers, for startup logging and tests"""
    return {
        'commands': sorted(t.__name__ for t in _COMMAND_HANDLERS),
        'queries': sorted(t.__name__ for t in _QUERY_HANDLERS),
    }
