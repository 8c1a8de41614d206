"""
Text format for generated tracks.

One line per field:

    3x3 | 0,0:S 0,1:BR 1,1:BL 0,2:F<R

- Grid size before the bar, as WxH
- Segments after the bar, in placement order, separated by spaces
- Each segment is x,y:KIND where KIND is a SegmentKind value (S, F, TL, TR,
  BL, BR, TB, LR)
- A Finish carries its arrival side after '<' (U, D, L or R)
"""

from __future__ import annotations

from pathgen import Field, Segment
from segment_catalog import SegmentKind
from tilt_types import Coordinate, GridSize, Side

__all__ = ["format_field", "parse_field"]

_SIDE_CODES = {
    "U": Side.UP,
    "D": Side.DOWN,
    "L": Side.LEFT,
    "R": Side.RIGHT,
}
_CODES_BY_SIDE = {side: code for code, side in _SIDE_CODES.items()}
_KINDS = {kind.value: kind for kind in SegmentKind}


def format_field(field: Field) -> str:
    """Render a field as a single line of text."""
    tokens: list[str] = []
    for segment in field:
        token = f"{segment.coordinate.x},{segment.coordinate.y}:{segment.kind.value}"
        if segment.arrival is not None:
            token += f"<{_CODES_BY_SIDE[segment.arrival]}"
        tokens.append(token)
    size = field.grid_size
    return f"{size.width}x{size.height} | " + " ".join(tokens)


def _parse_segment(token: str, position: int) -> Segment:
    coord_str, sep, kind_str = token.partition(":")
    arrival: Side | None = None
    if "<" in kind_str:
        kind_str, _, arrival_str = kind_str.partition("<")
        arrival = _SIDE_CODES.get(arrival_str)
        if arrival is None:
            raise ValueError(
                f"Invalid arrival side: '{arrival_str}'\n"
                f"  Token {position}: \"{token}\"\n"
                f"  Valid sides: {', '.join(_SIDE_CODES)}"
            )

    xy = coord_str.split(",")
    try:
        if not sep or len(xy) != 2:
            raise ValueError(token)
        x, y = int(xy[0]), int(xy[1])
    except ValueError:
        raise ValueError(
            f"Invalid segment token: '{token}'\n"
            f"  Token {position}\n"
            f"  Expected format: x,y:KIND (e.g. '0,1:BR', '2,2:F<L')"
        ) from None

    kind = _KINDS.get(kind_str)
    if kind is None:
        raise ValueError(
            f"Unknown segment kind: '{kind_str}'\n"
            f"  Token {position}: \"{token}\"\n"
            f"  Valid kinds: {', '.join(_KINDS)}"
        )

    return Segment(Coordinate(x, y), kind, arrival)


def parse_field(text: str) -> Field:
    """
    Parse a field from the one-line text format.

    Raises:
        ValueError: On malformed text, unknown kinds or repeated coordinates
    """
    size_str, sep, body = text.strip().partition("|")
    dims = size_str.strip().lower().split("x")
    try:
        if not sep or len(dims) != 2:
            raise ValueError(size_str)
        width, height = int(dims[0]), int(dims[1])
    except ValueError:
        raise ValueError(
            f"Invalid field header: '{size_str.strip()}'\n"
            f"  Expected 'WxH | segments...' (e.g. '3x3 | 0,0:S 0,1:F<D')"
        ) from None
    grid_size = GridSize(width, height)

    segments = [
        _parse_segment(token, i) for i, token in enumerate(body.split())
    ]
    return Field.from_segments(grid_size, segments)
