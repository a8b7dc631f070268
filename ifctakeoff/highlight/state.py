"""Highlight modes as a pure state transition.

:func:`transition` takes the current :class:`HighlightState`, the requested
mode and a snapshot of the scene, and returns the new state plus the list of
appearance changes to apply.  It never touches a host, which keeps every mode
testable without a viewer.

Every transition starts by restoring whatever the previous one changed, so
switching modes, or going back to ``NORMAL``, always returns each element to
the exact appearance it had before it was first touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Iterable, Mapping, Optional

from ifctakeoff.config import ACCEPTED_COLOR, HIGHLIGHT_COLOR, PENDING_COLOR
from ifctakeoff.scene.host import EntityAppearance

TypeKey = tuple[str, str]


class HighlightMode(str, Enum):
    NORMAL = "normal"
    HIGHLIGHT = "highlight"
    ONLY_EDITED = "only-edited"
    HIDE_EDITED = "hide-edited"
    ACCEPTED_BUDGET = "accepted-budget"


@dataclass(frozen=True)
class EntitySnapshot:
    """One scene entity as seen right now.

    ``key`` is the element's ``(category, resolved type)`` or None when the
    entity has no metadata.
    """

    entity_id: str
    key: Optional[TypeKey]
    appearance: EntityAppearance


@dataclass(frozen=True)
class Mutation:
    entity_id: str
    appearance: EntityAppearance


@dataclass(frozen=True)
class HighlightState:
    mode: HighlightMode = HighlightMode.NORMAL
    affected: frozenset[str] = frozenset()
    saved: Mapping[str, EntityAppearance] = field(default_factory=dict)


def restore_mutations(state: HighlightState) -> list[Mutation]:
    return [Mutation(entity_id, appearance) for entity_id, appearance in state.saved.items()]


def _target(
    mode: HighlightMode,
    edited: bool,
    current: EntityAppearance,
    key: Optional[TypeKey],
    accepted_keys: AbstractSet[TypeKey],
) -> Optional[EntityAppearance]:
    """Appearance *mode* wants for one entity, or None to leave it alone."""
    if mode == HighlightMode.HIGHLIGHT:
        return EntityAppearance(visible=True, colorize=HIGHLIGHT_COLOR) if edited else None

    if mode == HighlightMode.ONLY_EDITED:
        if edited:
            return EntityAppearance(visible=True, colorize=HIGHLIGHT_COLOR)
        return EntityAppearance(visible=False, colorize=current.colorize)

    if mode == HighlightMode.HIDE_EDITED:
        if edited:
            return EntityAppearance(visible=False, colorize=current.colorize)
        if not current.visible:
            return EntityAppearance(visible=True, colorize=current.colorize)
        return None

    if mode == HighlightMode.ACCEPTED_BUDGET:
        if not edited:
            return None
        color = ACCEPTED_COLOR if key in accepted_keys else PENDING_COLOR
        return EntityAppearance(visible=True, colorize=color)

    return None


def transition(
    state: HighlightState,
    mode: HighlightMode | str,
    edited_keys: AbstractSet[TypeKey],
    entities: Iterable[EntitySnapshot],
    *,
    accepted_keys: AbstractSet[TypeKey] = frozenset(),
) -> tuple[HighlightState, list[Mutation]]:
    """Move from *state* to *mode*.

    Returns the new state and the mutations to apply in order: restores of
    every previously changed entity first, then the new mode's changes.
    """
    mode = HighlightMode(mode)
    mutations = restore_mutations(state)
    saved: dict[str, EntityAppearance] = {}
    affected: set[str] = set()

    if mode != HighlightMode.NORMAL:
        for entity in entities:
            # What the entity looks like once the restores have run.
            current = state.saved.get(entity.entity_id, entity.appearance)
            edited = entity.key is not None and entity.key in edited_keys
            target = _target(mode, edited, current, entity.key, accepted_keys)
            if target is None:
                continue
            if edited:
                affected.add(entity.entity_id)
            if target != current:
                saved[entity.entity_id] = current
                mutations.append(Mutation(entity.entity_id, target))

    return HighlightState(mode=mode, affected=frozenset(affected), saved=saved), mutations
