"""
Resolution step observability.

Pass an ``on_step`` callback to :func:`effectrun.perform` (or to
:class:`effectrun.EffectInterpreter`) to receive a :class:`ResolutionEvent`
for every step the interpreter takes.

Example usage:
    def log_step(event: ResolutionEvent):
        print(f"{'  ' * event.depth}{event.kind}: {event.value!r}")

    await perform(table, workflow(), on_step=log_step)

Or report through loguru:
    await perform(table, workflow(), on_step=loguru_step_logger("INFO"))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from loguru import logger as loguru_logger

# dispatch: an effect is handed to its performer
# yield:    a generator yielded a value
# return:   a generator finished with a value
# await:    an awaitable is being awaited
# failure:  a failure is being thrown into a generator
EventKind = Literal["dispatch", "yield", "return", "await", "failure"]

StepHook = Callable[["ResolutionEvent"], None]

loguru_logger = loguru_logger.bind(component="effectrun")


@dataclass(frozen=True)
class ResolutionEvent:
    """A single interpreter step.

    Attributes:
        kind: What happened.
        value: The effect, yielded/returned value, awaitable or error involved.
        depth: Nesting depth of the value being resolved; the root is 0.
    """

    kind: EventKind
    value: Any
    depth: int

    def describe(self) -> str:
        return f"{self.kind} {self.value!r} (depth={self.depth})"


def loguru_step_logger(level: str = "DEBUG") -> StepHook:
    """Return an ``on_step`` hook that reports each event through loguru."""

    def _log_step(event: ResolutionEvent) -> None:
        loguru_logger.log(level, "{}{}", "  " * event.depth, event.describe())

    return _log_step


__all__ = ["EventKind", "ResolutionEvent", "StepHook", "loguru_step_logger"]
