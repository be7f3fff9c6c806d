"""
Result sum type for effectrun.

``run`` and ``run_async`` report the outcome of a resolution as ``Ok(value)``
or ``Err(error)`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from effectrun.effect import EffectType
from effectrun.errors import NoPerformerError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Outcome of resolving a value: the final result or the unrecovered failure."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T_co:
        """Return the value or raise the stored error."""

        if isinstance(self, Ok):
            return self.value
        raise self.error

    def __bool__(self) -> bool:
        return self.is_ok()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Resolution finished with ``value``."""
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Resolution failed with ``error``."""
    error: Exception

    @property
    def missing_performer(self) -> EffectType | None:
        """The effect type nobody could perform, when that is why resolution failed."""

        if isinstance(self.error, NoPerformerError):
            return self.error.effect_type
        return None


__all__ = ["Err", "Ok", "Result"]
