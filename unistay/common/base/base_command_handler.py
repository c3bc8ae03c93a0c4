# =============================================================================
# File: unistay/common/base/base_command_handler.py
# Description: Base command handler for UniStay.
#              Converts raised domain errors into Err results and wraps
#              infrastructure failures into OperationFailed errors.
# =============================================================================

from __future__ import annotations

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

log = logging.getLogger("unistay.base_handler")

TCommand = TypeVar("TCommand")
TValue = TypeVar("TValue")

# Failures that mean the store or network misbehaved, not the caller
INFRASTRUCTURE_ERRORS = (InfrastructureError, OSError, asyncio.TimeoutError)


class BaseCommandHandler(ABC, Generic[TCommand, TValue]):
    """
    Base class for all command handlers in UniStay.

    Subclasses implement ``execute`` and raise domain exceptions for
    business-rule failures. ``handle`` is the boundary the command bus
    calls: it never raises for expected failures and returns
    ``Ok(value)`` or ``Err(error)`` instead.

    Infrastructure failures are logged with their traceback and replaced
    by the subclass's ``operation_failed`` error, keeping the original
    exception as ``__cause__``. Cancellation is not intercepted.
    """

    def __init__(self, deps: 'HandlerDependencies'):
        self.chat_store = deps.chat_store
        self.user_directory = deps.user_directory
        self.notifier = deps.chat_notifier

    async def handle(self, command: TCommand) -> Result[TValue, UniStayException]:
        try:
            return Ok(await self.execute(command))
        except INFRASTRUCTURE_ERRORS as e:
            log.error(
                f"{type(self).__name__} failed on infrastructure error: {e}",
                exc_info=True
            )
            failure = self.operation_failed(command)
            failure.__cause__ = e
            return Err(failure)
        except OperationFailedError as e:
            log.error(f"{type(self).__name__} failed: {e}")
            return Err(e)
        except UniStayException as e:
            log.debug(f"{type(self).__name__} rejected: {e}")
            return Err(e)

    @abstractmethod
    async def execute(self, command: TCommand) -> TValue:
        """Authorize, mutate and persist; raise domain errors on rejection"""
        pass

    @abstractmethod
    def operation_failed(self, command: TCommand) -> OperationFailedError:
        """Error reported when the store fails underneath this command"""
        pass

