# =============================================================================
# File: unistay/common/result.py
# Description: Success-or-error return type for command and query handlers
# =============================================================================
"""
Result type used at the handler boundary.

Expected business failures travel as ``Err(error)`` values instead of
exceptions, so callers must look at the outcome explicitly:

    result = await command_bus.send(SendMessageCommand(...))
    if result.is_err:
        log.warning(f"send rejected: {result.error}")
    message = result.unwrap()

``unwrap()`` raises the carried exception, which is what the HTTP layer
relies on to turn an error into a status code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union, NoReturn

from unistay.common.exceptions.exceptions import UniStayException

T = TypeVar("T")
E = TypeVar("E", bound=UniStayException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err[E]]
