"""
Effect types and effect instances.

An effect type is an opaque identity created once with :func:`define`. Calling
it builds an inert :class:`Effect` stamped with that identity. Dispatch only
ever compares identities, never classes or payload structure.

Example:
    >>> Fetch = define("Fetch", lambda self, url: setattr(self, "url", url))
    >>> effect = Fetch("https://example.com")
    >>> get_type(effect) is Fetch
    True
    >>> vars(effect)
    {'url': 'https://example.com'}
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from effectrun.utils import CodeLocation, capture_creation_context

DEFAULT_EFFECT_NAME = "Effect"

Initializer = Callable[..., None]


def _default_initializer(instance: Effect, *args: Any, **kwargs: Any) -> None:
    pass


class Effect:
    """An inert effect instance.

    The bound type and creation site live in slots, so ``vars(effect)`` holds
    only the payload the initializer set. Read them with :func:`get_type` and
    :func:`get_created_at`; the attribute namespace belongs to the payload.
    """

    __slots__ = ("_effect_type", "_created_at", "__dict__", "__weakref__")

    def __init__(self, effect_type: EffectType, created_at: CodeLocation | None = None):
        object.__setattr__(self, "_effect_type", effect_type)
        object.__setattr__(self, "_created_at", created_at)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _RESERVED_NAMES:
            raise AttributeError(f"{name!r} is reserved and cannot be used as a payload name")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if name in _RESERVED_NAMES:
            raise AttributeError(f"{name!r} is reserved and cannot be deleted")
        object.__delattr__(self, name)

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in vars(self).items())
        return f"{self._effect_type.name}({fields})"


_RESERVED_NAMES = frozenset(Effect.__slots__)


class EffectType:
    """Identity of one kind of effect, and the factory for its instances.

    Equality and hashing are by reference: two types defined with the same
    name and initializer are still different types.
    """

    __slots__ = ("_name", "_initializer", "__weakref__")

    def __init__(self, name: str, initializer: Initializer):
        self._name = name
        self._initializer = initializer

    @property
    def name(self) -> str:
        return self._name

    @property
    def initializer(self) -> Initializer:
        return self._initializer

    def __call__(self, *args: Any, **kwargs: Any) -> Effect:
        instance = Effect(self, capture_creation_context(skip_frames=2))
        self._initializer(instance, *args, **kwargs)
        return instance

    def matches(self, value: Any) -> bool:
        """Return True if ``value`` is an effect of exactly this type."""
        return get_type(value) is self

    def __repr__(self) -> str:
        return f"<EffectType {self._name!r}>"


def define(
    name: str | Initializer | None = None,
    initializer: Initializer | None = None,
) -> EffectType:
    """Define a new effect type.

    Args:
        name: Human-readable name used in diagnostics. Defaults to ``"Effect"``.
            A callable passed here with no ``initializer`` is taken as the
            initializer.
        initializer: Called as ``initializer(instance, *args, **kwargs)`` each
            time the type is invoked, to populate payload attributes.

    Returns:
        A new, distinct :class:`EffectType`.
    """
    if callable(name) and initializer is None:
        initializer, name = name, None
    if name is not None and not isinstance(name, str):
        raise TypeError(f"Effect name must be a string, got {type(name).__name__}")
    if initializer is not None and not callable(initializer):
        raise TypeError(
            f"Effect initializer must be callable, got {type(initializer).__name__}"
        )
    return EffectType(
        name if name is not None else DEFAULT_EFFECT_NAME,
        initializer or _default_initializer,
    )


def is_effect(value: Any) -> bool:
    """Return True if ``value`` carries an effect type identity."""
    return get_type(value) is not None


def get_type(value: Any) -> EffectType | None:
    """Return the effect type bound to ``value``, or ``None`` for non-effects."""
    if isinstance(value, Effect):
        return value._effect_type
    return None


def get_created_at(value: Any) -> CodeLocation | None:
    """Return where the effect ``value`` was created, if it was captured."""
    if isinstance(value, Effect):
        return value._created_at
    return None


__all__ = [
    "DEFAULT_EFFECT_NAME",
    "Effect",
    "EffectType",
    "define",
    "get_created_at",
    "get_type",
    "is_effect",
]
