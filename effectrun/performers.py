"""
Performer calling conventions.

A performer is registered as one of two explicit variants:

- :class:`Direct` performers are called as ``fn(effect)`` and return their
  result (a value, an awaitable, another effect or a generator) or raise.
- :class:`Callback` performers are called as ``fn(effect, completion)`` and
  report their outcome later through the :class:`Completion` they receive.

With ``contextual=True`` the interpreter's context is passed first:
``fn(context, effect)`` and ``fn(context, effect, completion)``.

Both variants can be applied as decorators::

    @Callback
    def perform_sleep(effect, completion):
        threading.Timer(effect.seconds, completion.complete).start()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from effectrun.effect import Effect
from effectrun.errors import CompletionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Direct:
    """Performer that returns its result or raises."""

    fn: Callable[..., Any]
    contextual: bool = False

    def __post_init__(self) -> None:
        if not callable(self.fn):
            raise TypeError(f"Performer must be callable, got {type(self.fn).__name__}")

    def arguments(self, effect: Effect, context: Any) -> tuple[Any, ...]:
        return (context, effect) if self.contextual else (effect,)


@dataclass(frozen=True)
class Callback:
    """Performer that reports its outcome through a completion callback.

    The function must call the completion exactly once, eventually:
    ``completion(error)`` for a failure, ``completion(None, result)`` for a
    success. If it never does, the resolution stays pending.
    """

    fn: Callable[..., Any]
    contextual: bool = False

    def __post_init__(self) -> None:
        if not callable(self.fn):
            raise TypeError(f"Performer must be callable, got {type(self.fn).__name__}")

    def arguments(
        self, effect: Effect, context: Any, completion: Completion
    ) -> tuple[Any, ...]:
        if self.contextual:
            return (context, effect, completion)
        return (effect, completion)


Performer = Union[Direct, Callback]


def as_performer(value: Any) -> Performer:
    """Normalise a table entry: bare callables are treated as :class:`Direct`."""
    if isinstance(value, (Direct, Callback)):
        return value
    if callable(value):
        return Direct(value)
    raise TypeError(
        f"Expected a callable or a Direct/Callback performer, got {type(value).__name__}"
    )


class Completion:
    """One-shot completion callback handed to :class:`Callback` performers.

    May be called from any thread. The first call settles the pending
    resolution; any later call is logged and ignored.
    """

    def __init__(self, future: asyncio.Future[Any], effect: Effect) -> None:
        self._future = future
        self._loop = future.get_loop()
        self._effect = effect
        self._lock = threading.Lock()
        self._called = False

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self, error: Any = None, result: Any = None) -> None:
        with self._lock:
            if self._called:
                logger.warning(
                    f"Performer for {self._effect!r} completed more than once; "
                    "ignoring the extra completion"
                )
                return
            self._called = True

        if error is not None and not isinstance(error, Exception):
            error = CompletionError(error)
        self._loop.call_soon_threadsafe(self._settle, error, result)

    def complete(self, value: Any = None) -> None:
        """Complete successfully with ``value``."""
        self(None, value)

    def fail(self, error: Exception) -> None:
        """Complete with ``error``."""
        if error is None:
            raise TypeError("fail() requires an error")
        self(error)

    def _settle(self, error: Exception | None, result: Any) -> None:
        if self._future.done():
            # the resolution was cancelled while the performer was running
            return
        if error is not None:
            self._future.set_exception(error)
        else:
            self._future.set_result(result)


__all__ = ["Callback", "Completion", "Direct", "Performer", "as_performer"]
