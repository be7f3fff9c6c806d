"""
Dispatch table mapping effect types to performers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Union

from frozendict import frozendict

from effectrun.effect import EffectType, get_type
from effectrun.performers import Performer, as_performer

PerformerPairs = Iterable[tuple[EffectType, Any]]


def _normalize(pairs: PerformerPairs | None) -> Iterator[tuple[EffectType, Performer]]:
    for effect_type, performer in pairs or ():
        if not isinstance(effect_type, EffectType):
            raise TypeError(
                f"Dispatch table keys must be effect types created with define(), "
                f"got {type(effect_type).__name__}"
            )
        yield effect_type, as_performer(performer)


class DispatchTable:
    """Immutable mapping from effect type to performer.

    Lookups are exact identity matches on the effect type; there is no
    fallback or inheritance. Later entries for the same type replace earlier
    ones.

    Example:
        >>> table = DispatchTable([(Fetch, perform_fetch)])
        >>> table.get_performer(Fetch("x"))
        Direct(fn=<function perform_fetch ...>, contextual=False)
    """

    __slots__ = ("_performers",)

    def __init__(self, pairs: PerformerPairs | None = None) -> None:
        self._performers: frozendict[EffectType, Performer] = frozendict(_normalize(pairs))

    @classmethod
    def build(cls, pairs: PerformerPairs | None = None) -> DispatchTable:
        return cls(pairs)

    def get_performer(self, effect: Any) -> Performer | None:
        """Return the performer for ``effect``'s type, or ``None``.

        Never raises; non-effects and unregistered types both give ``None``.
        """
        effect_type = get_type(effect)
        if effect_type is None:
            return None
        return self._performers.get(effect_type)

    @property
    def effect_types(self) -> tuple[EffectType, ...]:
        return tuple(self._performers)

    def with_performer(self, effect_type: EffectType, performer: Any) -> DispatchTable:
        """Return a new table with ``performer`` registered for ``effect_type``."""
        return self.merge([(effect_type, performer)])

    def merge(self, other: Union[DispatchTable, PerformerPairs]) -> DispatchTable:
        """Return a new table combining both; entries from ``other`` win."""
        if isinstance(other, DispatchTable):
            pairs = other._performers.items()
        else:
            pairs = other
        return DispatchTable([*self._performers.items(), *pairs])

    def __or__(self, other: Any) -> DispatchTable:
        if not isinstance(other, DispatchTable):
            return NotImplemented
        return self.merge(other)

    def __contains__(self, effect_type: object) -> bool:
        return effect_type in self._performers

    def __len__(self) -> int:
        return len(self._performers)

    def __repr__(self) -> str:
        names = ", ".join(effect_type.name for effect_type in self._performers)
        return f"DispatchTable([{names}])"


__all__ = ["DispatchTable", "PerformerPairs"]
