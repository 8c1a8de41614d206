"""
Shared type definitions for the tilt maze generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Side(Enum):
    """Side of a cell a corridor can open on."""

    UP = "up"  # Increasing y
    DOWN = "down"  # Decreasing y
    LEFT = "left"  # Decreasing x
    RIGHT = "right"  # Increasing x

    @property
    def opposite(self) -> Side:
        return _OPPOSITES[self]

    @property
    def delta(self) -> tuple[int, int]:
        """(dx, dy) of one step toward this side."""
        return _DELTAS[self]


_OPPOSITES = {
    Side.UP: Side.DOWN,
    Side.DOWN: Side.UP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}

_DELTAS = {
    Side.UP: (0, 1),
    Side.DOWN: (0, -1),
    Side.LEFT: (-1, 0),
    Side.RIGHT: (1, 0),
}


# =============================================================================
# Lattice Types
# =============================================================================


@dataclass(frozen=True)
class Coordinate:
    """A cell in the lattice. Bounds come from the active GridSize."""

    x: int
    y: int

    def step(self, side: Side) -> Coordinate:
        dx, dy = side.delta
        return Coordinate(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


MIN_GRID_DIMENSION = 3


@dataclass(frozen=True)
class GridSize:
    """Width and height of a grid. Both must be at least 3."""

    width: int
    height: int

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(
                    f"Invalid grid {name}: {value!r}\n"
                    f"  Type: {type(value).__name__}\n"
                    f"  Grid dimensions must be whole numbers of cells"
                )
        if self.width < MIN_GRID_DIMENSION or self.height < MIN_GRID_DIMENSION:
            raise ValueError(
                f"Grid too small: {self.width}x{self.height}\n"
                f"  Minimum size: {MIN_GRID_DIMENSION}x{MIN_GRID_DIMENSION}\n"
                f"  A start, at least one corridor cell and a finish must fit"
            )

    def contains(self, coord: Coordinate) -> bool:
        return 0 <= coord.x < self.width and 0 <= coord.y < self.height

    def exits(self, coord: Coordinate, side: Side) -> bool:
        """True if leaving `coord` through `side` steps outside the grid."""
        return not self.contains(coord.step(side))

    @property
    def cells(self) -> int:
        return self.width * self.height

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"
