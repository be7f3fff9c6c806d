from __future__ import annotations

from typing import Any

from effectrun.effect import Effect, get_created_at, get_type


class EffectRuntimeError(Exception):
    """Base class for errors raised by the effectrun runtime itself."""


class NoPerformerError(EffectRuntimeError, LookupError):
    """Raised when no performer is registered for an effect's type."""

    def __init__(self, effect: Effect) -> None:
        self.effect = effect
        self.effect_type = get_type(effect)
        self.type_name = self.effect_type.name if self.effect_type is not None else None
        message = f'No performer for "{self.type_name}" could be found'
        created_at = get_created_at(effect)
        if created_at is not None:
            message = f"{message}\nEffect created at: {created_at.format()}"
        super().__init__(message)


class CompletionError(EffectRuntimeError):
    """Raised when a callback performer completes with a non-exception error value."""

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(f"Performer completed with error value {reason!r}")


__all__ = ["CompletionError", "EffectRuntimeError", "NoPerformerError"]
