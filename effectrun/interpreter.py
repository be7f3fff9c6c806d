"""
Effect interpreter for effectrun.

This module contains the EffectInterpreter that resolves a root value by
dispatching effects to their performers, stepping generators through their
yield points and awaiting awaitables, until a final value or an unrecovered
failure remains.

A value is resolved by kind:

1. generator: driven step by step; every yielded value is resolved before
   the generator is resumed with the result (``send``) or the failure
   (``throw``). Its return value is resolved again.
2. awaitable (or ``concurrent.futures.Future``): awaited, the outcome is final.
3. effect: handed to its performer; whatever the performer produces is
   resolved again.
4. anything else: final.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from collections.abc import Generator
from typing import Any

from effectrun.dispatch import DispatchTable
from effectrun.effect import Effect, is_effect
from effectrun.errors import NoPerformerError
from effectrun.observability import EventKind, ResolutionEvent, StepHook, loguru_step_logger
from effectrun.performers import Callback, Completion
from effectrun.result import Err, Ok, Result
from effectrun.utils import TRACE_STEPS

logger = logging.getLogger(__name__)


class EffectInterpreter:
    """
    Engine that resolves effects, generators and awaitables against a dispatch table.

    Resolution is sequential: a generator never advances until the value it
    yielded, including everything that value expands into, has settled.
    """

    def __init__(
        self,
        table: DispatchTable,
        *,
        context: Any = None,
        on_step: StepHook | None = None,
    ):
        """Initialize the interpreter.

        Args:
            table: Dispatch table used to find the performer for each effect.
            context: Application value passed to performers registered with
                ``contextual=True``.
            on_step: Optional callback receiving a ResolutionEvent per step.
                Defaults to the loguru step logger when ``EFFECTRUN_TRACE`` is set.
        """
        if on_step is None and TRACE_STEPS:
            on_step = loguru_step_logger()

        self._table = table
        self._context = context
        self._on_step = on_step

    @property
    def table(self) -> DispatchTable:
        return self._table

    @property
    def context(self) -> Any:
        return self._context

    def perform(
        self, value: Any, *, loop: asyncio.AbstractEventLoop | None = None
    ) -> asyncio.Future[Any]:
        """
        Start resolving ``value`` and return a future for the outcome.

        Must be called with a running event loop unless ``loop`` is given.
        Every failure, including a missing performer, is reported through the
        returned future.
        """
        if loop is None:
            loop = asyncio.get_running_loop()
        return loop.create_task(self.resolve(value))

    def run(self, value: Any) -> Result[Any]:
        """
        Resolve ``value`` synchronously and return ``Ok(result)`` or ``Err(error)``.

        Internally uses asyncio.run(); inside a running loop use run_async() instead.
        """
        return asyncio.run(self.run_async(value))

    async def run_async(self, value: Any) -> Result[Any]:
        """Resolve ``value`` and return ``Ok(result)`` or ``Err(error)``."""
        try:
            return Ok(await self.resolve(value))
        except Exception as exc:
            return Err(exc)

    async def resolve(self, value: Any, depth: int = 0) -> Any:
        """Resolve ``value`` to its final result, raising on unrecovered failure.

        Generators are kept on an explicit stack instead of nested calls, so
        nesting depth is not limited by the Python recursion limit.
        """
        # suspended generators, innermost last
        stack: list[Generator[Any, Any, Any]] = []
        error: Exception | None = None
        # True once value/error is the outcome to hand to the innermost generator
        settled = False

        try:
            while True:
                if not settled:
                    try:
                        value, settled = await self._advance(value, stack, depth)
                    except Exception as exc:
                        value, error, settled = None, exc, True
                    continue

                if not stack:
                    if error is not None:
                        raise error
                    return value

                coroutine = stack[-1]
                level = depth + len(stack) - 1

                if error is not None:
                    logger.debug(f"failure thrown into {coroutine!r}: {error!r}")
                    try:
                        self._emit("failure", error, level)
                    except Exception as exc:
                        error = exc

                try:
                    if error is None:
                        current = coroutine.send(value)
                    else:
                        current = coroutine.throw(error)
                except StopIteration as stop:
                    stack.pop()
                    value, error, settled = stop.value, None, False
                    try:
                        self._emit("return", stop.value, level)
                    except Exception as exc:
                        value, error, settled = None, exc, True
                    continue
                except Exception as exc:
                    stack.pop()
                    value, error, settled = None, exc, True
                    continue

                logger.debug(f"yield: {current!r}")
                value, error, settled = current, None, False
                try:
                    self._emit("yield", current, level)
                except Exception as exc:
                    value, error, settled = None, exc, True
        finally:
            # only non-empty when resolution is abandoned, e.g. on cancellation
            while stack:
                stack.pop().close()

    async def _advance(
        self, value: Any, stack: list[Generator[Any, Any, Any]], depth: int
    ) -> tuple[Any, bool]:
        """Take one resolution step on ``value``.

        Returns the next value and whether it is settled. A generator is pushed
        onto ``stack`` and settles with ``None``, its first resumption value.
        """
        level = depth + len(stack)
        if isinstance(value, Generator):
            stack.append(value)
            return None, True
        if isinstance(value, concurrent.futures.Future):
            return asyncio.wrap_future(value), False
        if inspect.isawaitable(value):
            self._emit("await", value, level)
            return await value, True
        if is_effect(value):
            return await self._perform_effect(value, level), False
        return value, True

    async def _perform_effect(self, effect: Effect, depth: int) -> Any:
        """Dispatch ``effect`` and return what its performer produced."""
        performer = self._table.get_performer(effect)
        if performer is None:
            raise NoPerformerError(effect)

        logger.debug(f"effect: {effect!r}")
        self._emit("dispatch", effect, depth)

        if isinstance(performer, Callback):
            return await self._call_back(performer, effect)
        return performer.fn(*performer.arguments(effect, self._context))

    async def _call_back(self, performer: Callback, effect: Effect) -> Any:
        future = asyncio.get_running_loop().create_future()
        completion = Completion(future, effect)

        try:
            performer.fn(*performer.arguments(effect, self._context, completion))
        except Exception:
            if not completion.called:
                future.cancel()
                raise
            logger.warning(
                f"Performer for {effect!r} raised after completing; the error is ignored",
                exc_info=True,
            )

        return await future

    def _emit(self, kind: EventKind, value: Any, depth: int) -> None:
        if self._on_step is not None:
            self._on_step(ResolutionEvent(kind, value, depth))


def perform(
    table: DispatchTable,
    value: Any,
    *,
    context: Any = None,
    on_step: StepHook | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[Any]:
    """Resolve ``value`` against ``table``; returns a future for the final result.

    ``value`` may be a plain value, an effect, an awaitable or a generator.

    Example:
        >>> Fetch = define("Fetch", lambda self, url: setattr(self, "url", url))
        >>> table = DispatchTable([(Fetch, lambda effect: "data:" + effect.url)])
        >>> await perform(table, Fetch("x"))
        'data:x'
    """
    interpreter = EffectInterpreter(table, context=context, on_step=on_step)
    return interpreter.perform(value, loop=loop)


async def run_async(
    table: DispatchTable,
    value: Any,
    *,
    context: Any = None,
    on_step: StepHook | None = None,
) -> Result[Any]:
    """Resolve ``value`` and return ``Ok(result)`` or ``Err(error)``."""
    interpreter = EffectInterpreter(table, context=context, on_step=on_step)
    return await interpreter.run_async(value)


def run(
    table: DispatchTable,
    value: Any,
    *,
    context: Any = None,
    on_step: StepHook | None = None,
) -> Result[Any]:
    """Synchronous version of :func:`run_async`, using asyncio.run()."""
    interpreter = EffectInterpreter(table, context=context, on_step=on_step)
    return interpreter.run(value)


__all__ = ["EffectInterpreter", "perform", "run", "run_async"]
