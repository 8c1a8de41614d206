"""
Random track generation for tilt mazes.
Grows a single corridor from (0, 0) one segment at a time until no catalog
piece fits the next cell, then caps it with a Finish.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from segment_catalog import (
    CATALOG,
    SegmentKind,
    exit_side,
    finish_rotation,
    kinds_open_on,
    select_random,
)
from tilt_types import Coordinate, GridSize, Side

__all__ = [
    "CATALOG",
    "Constraints",
    "Coordinate",
    "Field",
    "GeneratorConfig",
    "GridSize",
    "PRESETS",
    "SceneNode",
    "Segment",
    "SegmentKind",
    "Side",
    "Violation",
    "ViolationKind",
    "check_field",
    "forced_constraints",
    "generate",
    "generate_from_config",
    "kinds_open_on",
    "parse_grid_size",
    "scene_position",
    "select_random",
]

logger = logging.getLogger(__name__)

START_COORDINATE = Coordinate(0, 0)
START_HEADING = Side.UP


# =============================================================================
# Data Structures: Placed Track
# =============================================================================


@dataclass(frozen=True)
class Segment:
    """
    One placed cell of the corridor.

    `arrival` is only set on a Finish: the side of the Finish cell that faces
    the previous segment. A Finish is open on that side and nowhere else.
    """

    coordinate: Coordinate
    kind: SegmentKind
    arrival: Side | None = None

    def __post_init__(self) -> None:
        if (self.kind is SegmentKind.FINISH) != (self.arrival is not None):
            raise ValueError(
                f"Invalid segment at {self.coordinate}\n"
                f"  Kind: {self.kind.name}, arrival: {self.arrival}\n"
                f"  A FINISH needs an arrival side; other kinds must not have one"
            )

    @property
    def openings(self) -> frozenset[Side]:
        if self.arrival is not None:
            return frozenset({self.arrival})
        return self.kind.openings

    def is_open(self, side: Side) -> bool:
        return side in self.openings

    @property
    def rotation(self) -> int:
        if self.arrival is not None:
            return finish_rotation(self.arrival)
        return self.kind.rotation


class Field:
    """
    Ordered segments of one generation run, indexed by coordinate.

    Consumers get a read-only view: iteration, lookup and neighbour queries.
    Only the generator (and `from_segments`) add segments.
    """

    def __init__(self, grid_size: GridSize) -> None:
        self.grid_size = grid_size
        self._segments: list[Segment] = []
        self._index: dict[Coordinate, Segment] = {}

    @classmethod
    def from_segments(cls, grid_size: GridSize, segments: list[Segment]) -> Field:
        field = cls(grid_size)
        for segment in segments:
            field._place(segment)
        return field

    def _place(self, segment: Segment) -> None:
        existing = self._index.get(segment.coordinate)
        if existing is not None:
            raise ValueError(
                f"Coordinate {segment.coordinate} already occupied\n"
                f"  Existing: {existing.kind.name}\n"
                f"  New: {segment.kind.name}"
            )
        self._segments.append(segment)
        self._index[segment.coordinate] = segment

    def get(self, coord: Coordinate) -> Segment | None:
        return self._index.get(coord)

    def neighbours(self, coord: Coordinate) -> list[tuple[Side, Segment]]:
        """Placed segments next to `coord`, with the side of `coord` they touch."""
        found: list[tuple[Side, Segment]] = []
        for side in Side:
            neighbour = self._index.get(coord.step(side))
            if neighbour is not None:
                found.append((side, neighbour))
        return found

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def start(self) -> Segment | None:
        return self._segments[0] if self._segments else None

    @property
    def finish(self) -> Segment | None:
        if self._segments and self._segments[-1].kind is SegmentKind.FINISH:
            return self._segments[-1]
        return None

    def scene_nodes(self, tile_size: int = 800) -> list[SceneNode]:
        return [SceneNode.for_segment(segment, tile_size) for segment in self._segments]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def __contains__(self, coord: object) -> bool:
        return coord in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return self.grid_size == other.grid_size and self._segments == other._segments

    def __repr__(self) -> str:
        return f"Field({self.grid_size}, {len(self._segments)} segments)"


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class GeneratorConfig:
    """Options for one generation run."""

    grid_size: GridSize
    seed: int | None = None  # None = fresh randomness every run


PRESETS: dict[str, GridSize] = {
    "easy": GridSize(3, 3),
    "medium": GridSize(5, 5),
    "hard": GridSize(10, 10),
}


def parse_grid_size(text: str) -> GridSize:
    """
    Parse a preset name ("easy", "medium", "hard") or an explicit "WxH".
    """
    key = text.strip().lower()
    if key in PRESETS:
        return PRESETS[key]

    parts = key.split("x")
    try:
        if len(parts) != 2:
            raise ValueError(text)
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(
            f"Invalid grid size: '{text}'\n"
            f"  Valid formats:\n"
            f"    - Preset name: {', '.join(PRESETS)}\n"
            f"    - Explicit size: WxH (e.g. '4x6')"
        ) from None
    return GridSize(width, height)


# =============================================================================
# Generation
# =============================================================================


@dataclass(frozen=True)
class Constraints:
    """Forced openness of a candidate cell."""

    openings: frozenset[Side]
    closings: frozenset[Side]


def forced_constraints(field: Field, candidate: Coordinate, arrival: Side) -> Constraints:
    """
    Derive the sides a segment at `candidate` must have open and closed.

    The arrival side is always open. Any other side that leaves the grid is
    closed. Any other side touching a placed segment copies that segment's
    openness on the shared side.
    """
    openings = {arrival}
    closings: set[Side] = set()

    for side in Side:
        if side is arrival:
            continue
        if field.grid_size.exits(candidate, side):
            closings.add(side)
            continue
        neighbour = field.get(candidate.step(side))
        if neighbour is None:
            continue
        if neighbour.is_open(side.opposite):
            openings.add(side)
        else:
            closings.add(side)

    return Constraints(frozenset(openings), frozenset(closings))


def generate(
    grid_size: GridSize,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> Field:
    """
    Generate one track for `grid_size`.

    Args:
        grid_size: Size of the grid (at least 3x3)
        rng: Random source; takes precedence over `seed`
        seed: Seed for a fresh random.Random when no rng is given

    Returns:
        The completed Field, Start first and Finish last
    """
    if rng is None:
        rng = random.Random(seed)

    field = Field(grid_size)
    field._place(Segment(START_COORDINATE, SegmentKind.START))

    current = START_COORDINATE
    heading = START_HEADING
    while True:
        candidate = current.step(heading)
        arrival = heading.opposite
        constraints = forced_constraints(field, candidate, arrival)
        kind = select_random(constraints.openings, constraints.closings, rng)

        if kind is None:
            field._place(Segment(candidate, SegmentKind.FINISH, arrival=arrival))
            break

        field._place(Segment(candidate, kind))
        logger.debug(
            "generate: %s at %s (open=%s, closed=%s)",
            kind.name,
            candidate,
            sorted(s.value for s in constraints.openings),
            sorted(s.value for s in constraints.closings),
        )
        current = candidate
        heading = exit_side(kind, arrival)

    logger.info(
        "generate: grid=%s, segments=%d, finish=%s",
        grid_size,
        len(field),
        candidate,
    )
    return field


def generate_from_config(config: GeneratorConfig) -> Field:
    return generate(config.grid_size, seed=config.seed)


# =============================================================================
# Consistency Checking
# =============================================================================


class ViolationKind(Enum):
    """Which track rule a field breaks."""

    DUPLICATE_COORDINATE = "duplicate_coordinate"  # Two segments share a cell
    MISMATCHED_SIDE = "mismatched_side"  # Neighbours disagree on a shared side
    BAD_START = "bad_start"  # Start missing, misplaced or repeated
    BAD_FINISH = "bad_finish"  # Finish missing, not last or repeated
    OUT_OF_BOUNDS = "out_of_bounds"  # Segment outside or open toward the edge
    DISCONNECTED = "disconnected"  # Consecutive segments are not joined


@dataclass(frozen=True)
class Violation:
    """One broken rule, located at a coordinate."""

    kind: ViolationKind
    coordinate: Coordinate
    details: str = ""


def check_field(field: Field) -> list[Violation]:
    """
    Check a field against every track rule.

    Returns:
        Violations found, in discovery order; empty when the field is valid
    """
    violations: list[Violation] = []
    segments = list(field)
    grid_size = field.grid_size

    seen: dict[Coordinate, Segment] = {}
    for segment in segments:
        if segment.coordinate in seen:
            violations.append(
                Violation(ViolationKind.DUPLICATE_COORDINATE, segment.coordinate)
            )
        seen[segment.coordinate] = segment

    starts = [s for s in segments if s.kind is SegmentKind.START]
    if len(starts) != 1 or segments[0].kind is not SegmentKind.START:
        coord = segments[0].coordinate if segments else START_COORDINATE
        violations.append(
            Violation(ViolationKind.BAD_START, coord, f"{len(starts)} start segments")
        )
    elif segments[0].coordinate != START_COORDINATE:
        violations.append(
            Violation(ViolationKind.BAD_START, segments[0].coordinate, "start not at (0, 0)")
        )

    finishes = [s for s in segments if s.kind is SegmentKind.FINISH]
    if len(finishes) != 1 or segments[-1].kind is not SegmentKind.FINISH:
        coord = segments[-1].coordinate if segments else START_COORDINATE
        violations.append(
            Violation(ViolationKind.BAD_FINISH, coord, f"{len(finishes)} finish segments")
        )

    for segment in segments:
        coord = segment.coordinate
        if not grid_size.contains(coord):
            violations.append(Violation(ViolationKind.OUT_OF_BOUNDS, coord, "outside grid"))
            continue
        for side in sorted(segment.openings, key=lambda s: s.value):
            if grid_size.exits(coord, side):
                violations.append(
                    Violation(ViolationKind.OUT_OF_BOUNDS, coord, f"open {side.value}")
                )

        # UP and RIGHT cover every adjacent pair exactly once
        for side in (Side.UP, Side.RIGHT):
            neighbour = seen.get(coord.step(side))
            if neighbour is None:
                continue
            if segment.is_open(side) != neighbour.is_open(side.opposite):
                violations.append(
                    Violation(
                        ViolationKind.MISMATCHED_SIDE,
                        coord,
                        f"{side.value}: {segment.kind.name} vs {neighbour.kind.name}"
                        f" at {neighbour.coordinate}",
                    )
                )

    for previous, following in zip(segments, segments[1:]):
        joined = any(
            previous.coordinate.step(side) == following.coordinate
            and previous.is_open(side)
            and following.is_open(side.opposite)
            for side in Side
        )
        if not joined:
            violations.append(
                Violation(
                    ViolationKind.DISCONNECTED,
                    following.coordinate,
                    f"not joined to {previous.coordinate}",
                )
            )

    return violations


# =============================================================================
# Scene Placement
# =============================================================================


PIECE_NAMES: dict[SegmentKind, str] = {
    SegmentKind.START: "start",
    SegmentKind.FINISH: "finish",
    SegmentKind.TOP_LEFT: "corner",
    SegmentKind.TOP_RIGHT: "corner",
    SegmentKind.BOTTOM_LEFT: "corner",
    SegmentKind.BOTTOM_RIGHT: "corner",
    SegmentKind.TOP_BOTTOM: "straight",
    SegmentKind.LEFT_RIGHT: "straight",
}

# Node name suffixes a scene uses to find placed segments
NODE_IDENTIFIERS: dict[SegmentKind, str] = {
    SegmentKind.START: "_Start",
    SegmentKind.FINISH: "_Finish",
    SegmentKind.TOP_LEFT: "_TL",
    SegmentKind.TOP_RIGHT: "_TR",
    SegmentKind.BOTTOM_LEFT: "_BL",
    SegmentKind.BOTTOM_RIGHT: "_BR",
    SegmentKind.TOP_BOTTOM: "_TB",
    SegmentKind.LEFT_RIGHT: "_LR",
}


def scene_position(coord: Coordinate, tile_size: int = 800) -> tuple[int, int]:
    """Centre of a cell in scene units."""
    half = tile_size // 2
    return (coord.x * tile_size + half, coord.y * tile_size + half)


@dataclass(frozen=True)
class SceneNode:
    """What a renderer needs to draw one segment."""

    name: str
    piece: str  # start / finish / corner / straight
    position: tuple[int, int]
    rotation: int  # Degrees, counter-clockwise

    @classmethod
    def for_segment(cls, segment: Segment, tile_size: int = 800) -> SceneNode:
        return cls(
            name=f"{segment.coordinate}{NODE_IDENTIFIERS[segment.kind]}",
            piece=PIECE_NAMES[segment.kind],
            position=scene_position(segment.coordinate, tile_size),
            rotation=segment.rotation,
        )
