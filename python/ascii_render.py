"""
ASCII rendering for generated tracks.

Each cell is drawn as a 3x3 character block: the segment symbol in the middle
and a corridor stroke on every open side. The top text row is the highest y.
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from pathgen import Field, Segment
from segment_catalog import SegmentKind
from tilt_types import Side

logger = logging.getLogger(__name__)

CELL_CHARS = 3
EMPTY_CHAR = " "

SYMBOLS: dict[SegmentKind, str] = {
    SegmentKind.START: "S",
    SegmentKind.FINISH: "F",
    SegmentKind.TOP_LEFT: "+",
    SegmentKind.TOP_RIGHT: "+",
    SegmentKind.BOTTOM_LEFT: "+",
    SegmentKind.BOTTOM_RIGHT: "+",
    SegmentKind.TOP_BOTTOM: "|",
    SegmentKind.LEFT_RIGHT: "-",
}

# (row offset, col offset, stroke) within a cell block, row 0 at the top
STROKES: dict[Side, tuple[int, int, str]] = {
    Side.UP: (0, 1, "|"),
    Side.DOWN: (2, 1, "|"),
    Side.LEFT: (1, 0, "-"),
    Side.RIGHT: (1, 2, "-"),
}


def segment_color(segment: Segment) -> Callable[[str], str]:
    if segment.kind is SegmentKind.START:
        return chalk.green
    if segment.kind is SegmentKind.FINISH:
        return chalk.red
    return chalk.cyan


def render_to_buffer(
    segment: Segment,
    buffer: list[list[str]],
    x: int,
    y: int,
    colorize: Callable[[str], str],
) -> None:
    """Draw one segment into the buffer with its block's top-left at (x, y)."""
    buffer[y + 1][x + 1] = colorize(SYMBOLS[segment.kind])
    for side in segment.openings:
        row, col, stroke = STROKES[side]
        buffer[y + row][x + col] = colorize(stroke)


def render(field: Field, color: bool = True) -> str:
    """
    Render a field to an ASCII string.

    Args:
        field: The field to draw
        color: Wrap characters in ANSI colours (start green, finish red)

    Returns:
        One line per character row, highest y first
    """
    size = field.grid_size
    char_w = size.width * CELL_CHARS
    char_h = size.height * CELL_CHARS
    logger.debug("render: grid=%s, chars=%dx%d", size, char_w, char_h)

    buffer: list[list[str]] = [[EMPTY_CHAR for _ in range(char_w)] for _ in range(char_h)]

    for segment in field:
        coord = segment.coordinate
        colorize = segment_color(segment) if color else (lambda s: s)
        render_to_buffer(
            segment,
            buffer,
            coord.x * CELL_CHARS,
            (size.height - 1 - coord.y) * CELL_CHARS,
            colorize,
        )

    return "\n".join("".join(row) for row in buffer)
