"""
Segment catalog: the closed set of track pieces and their openings.

Every kind declares which of its four sides are open. The table never changes
at runtime, so selection is plain predicate filtering over it. Only the six
corridor kinds are selectable; Start and Finish are placed by the generator.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Iterable

from tilt_types import Side

__all__ = [
    "CATALOG",
    "SegmentKind",
    "exit_side",
    "finish_rotation",
    "kinds_open_on",
    "select_random",
]


class SegmentKind(Enum):
    """Shape of a placed segment."""

    START = "S"
    FINISH = "F"
    TOP_LEFT = "TL"
    TOP_RIGHT = "TR"
    BOTTOM_LEFT = "BL"
    BOTTOM_RIGHT = "BR"
    TOP_BOTTOM = "TB"  # Vertical straight
    LEFT_RIGHT = "LR"  # Horizontal straight

    @property
    def openings(self) -> frozenset[Side]:
        return OPENINGS[self]

    @property
    def rotation(self) -> int:
        """Rotation of the rendered piece in degrees, counter-clockwise."""
        return ROTATIONS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (SegmentKind.START, SegmentKind.FINISH)

    def is_open(self, side: Side) -> bool:
        return side in OPENINGS[self]


OPENINGS: dict[SegmentKind, frozenset[Side]] = {
    SegmentKind.START: frozenset({Side.UP}),
    # Finish is a cap; the generator rotates it to face its arrival side
    SegmentKind.FINISH: frozenset({Side.RIGHT}),
    SegmentKind.TOP_LEFT: frozenset({Side.UP, Side.LEFT}),
    SegmentKind.TOP_RIGHT: frozenset({Side.UP, Side.RIGHT}),
    SegmentKind.BOTTOM_LEFT: frozenset({Side.DOWN, Side.LEFT}),
    SegmentKind.BOTTOM_RIGHT: frozenset({Side.DOWN, Side.RIGHT}),
    SegmentKind.TOP_BOTTOM: frozenset({Side.UP, Side.DOWN}),
    SegmentKind.LEFT_RIGHT: frozenset({Side.LEFT, Side.RIGHT}),
}

ROTATIONS: dict[SegmentKind, int] = {
    SegmentKind.START: 0,
    SegmentKind.FINISH: 0,
    SegmentKind.TOP_LEFT: 90,
    SegmentKind.TOP_RIGHT: 0,
    SegmentKind.BOTTOM_LEFT: 180,
    SegmentKind.BOTTOM_RIGHT: 270,
    SegmentKind.TOP_BOTTOM: 0,
    SegmentKind.LEFT_RIGHT: 90,
}

# Cap rotation by the side of the Finish cell that faces its predecessor
FINISH_ROTATIONS: dict[Side, int] = {
    Side.RIGHT: 0,
    Side.UP: 90,
    Side.LEFT: 180,
    Side.DOWN: 270,
}

# Selectable kinds, in filter order
CATALOG: tuple[SegmentKind, ...] = (
    SegmentKind.BOTTOM_LEFT,
    SegmentKind.BOTTOM_RIGHT,
    SegmentKind.TOP_LEFT,
    SegmentKind.TOP_RIGHT,
    SegmentKind.TOP_BOTTOM,
    SegmentKind.LEFT_RIGHT,
)


def _build_growth_rules() -> dict[tuple[SegmentKind, Side], Side]:
    rules: dict[tuple[SegmentKind, Side], Side] = {}
    for kind in CATALOG:
        first, second = sorted(OPENINGS[kind], key=lambda s: s.value)
        rules[(kind, first)] = second
        rules[(kind, second)] = first
    return rules


# (kind, entry side) -> exit side
GROWTH_RULES: dict[tuple[SegmentKind, Side], Side] = _build_growth_rules()


# =============================================================================
# Queries
# =============================================================================


def kinds_open_on(side: Side, required: bool) -> list[SegmentKind]:
    """Catalog kinds whose openness on `side` equals `required`."""
    return [kind for kind in CATALOG if kind.is_open(side) == required]


def select_random(
    openings: Iterable[Side],
    closings: Iterable[Side],
    rng: random.Random,
) -> SegmentKind | None:
    """
    Pick a catalog kind uniformly at random that satisfies every constraint.

    Args:
        openings: Sides the kind must be open on (at least one)
        closings: Sides the kind must be closed on (at most three)
        rng: Source of the uniform choice

    Returns:
        The chosen kind, or None when no kind satisfies the constraints
    """
    openings = frozenset(openings)
    closings = frozenset(closings)
    if not openings or len(closings) > 3:
        raise ValueError(
            f"Unsatisfiable catalog query\n"
            f"  Openings: {sorted(s.value for s in openings)}\n"
            f"  Closings: {sorted(s.value for s in closings)}\n"
            f"  A query needs at least one opening and at most three closings"
        )

    candidates = list(CATALOG)
    for side, required in [(s, True) for s in openings] + [(s, False) for s in closings]:
        matching = kinds_open_on(side, required)
        candidates = [kind for kind in candidates if kind in matching]

    if not candidates:
        return None
    return rng.choice(candidates)


def exit_side(kind: SegmentKind, entry: Side) -> Side:
    """Side a corridor kind leaves by when entered through `entry`."""
    try:
        return GROWTH_RULES[(kind, entry)]
    except KeyError:
        raise ValueError(
            f"No growth rule for {kind.name} entered from {entry.value}\n"
            f"  {kind.name} is open on: {sorted(s.value for s in kind.openings)}"
        ) from None


def finish_rotation(arrival: Side) -> int:
    return FINISH_ROTATIONS[arrival]
