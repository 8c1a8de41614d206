"""
Demonstration script for the tilt track generator.
"""

import logging
import sys
from collections import Counter

from ascii_render import render
from field_parser import format_field
from pathgen import PRESETS, GridSize, check_field, generate


def demo_presets(seed: int) -> None:
    """Print one track per difficulty preset."""
    for name, size in PRESETS.items():
        field = generate(size, seed=seed)
        print(f"=== {name} ({size}), seed {seed} ===")
        print(render(field))
        print(format_field(field))
        print()


def demo_statistics(size: GridSize, runs: int = 500) -> None:
    """Summarise track length and finish cells over many seeds."""
    lengths: list[int] = []
    finishes: Counter[tuple[int, int]] = Counter()
    invalid = 0

    for seed in range(runs):
        field = generate(size, seed=seed)
        lengths.append(len(field))
        finish = field[-1].coordinate
        finishes[(finish.x, finish.y)] += 1
        if check_field(field):
            invalid += 1

    print(f"=== {runs} tracks on {size} ===")
    print(f"Length: min {min(lengths)}, max {max(lengths)}, mean {sum(lengths) / runs:.1f}")
    print(f"Distinct finish cells: {len(finishes)}")
    for (x, y), count in finishes.most_common(5):
        print(f"  ({x}, {y}): {count}")
    print(f"Invalid tracks: {invalid}")
    print()


if __name__ == "__main__":
    if "-v" in sys.argv:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    demo_presets(seed=7)
    for size in PRESETS.values():
        demo_statistics(size)
