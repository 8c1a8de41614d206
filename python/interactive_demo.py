"""
Interactive demo for the tilt track generator.
Pick a grid size and regenerate tracks with keyboard commands.
"""

import logging

import readchar, sys
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render
from pathgen import (
    PRESETS,
    Field,
    GridSize,
    check_field,
    generate,
    parse_grid_size,
)

SIZE_KEYS = {
    "1": PRESETS["easy"],
    "2": PRESETS["medium"],
    "3": PRESETS["hard"],
}


class InteractiveDemo:
    """Interactive demo for track generation."""

    def __init__(self, grid_size: GridSize) -> None:
        self.grid_size = grid_size
        self.console = Console()
        self.runs = 0
        self.status_message = "Ready"
        self.field = self.regenerate()

    def regenerate(self) -> Field:
        """Discard the current track and generate a fresh one."""
        self.field = generate(self.grid_size)
        self.runs += 1
        self.status_message = f"Generated track #{self.runs}"
        return self.field

    def choose_size(self, grid_size: GridSize) -> None:
        self.grid_size = grid_size
        self.regenerate()
        self.status_message = f"Switched to {grid_size} grid"

    def generate_display(self) -> Panel:
        """Generate the current display with track and status."""
        status = Text()
        status.append("Grid: ", style="bold")
        status.append(f"{self.grid_size}\n")
        status.append("Segments: ", style="bold")
        status.append(f"{len(self.field)} of {self.grid_size.cells} cells\n")

        finish = self.field.finish
        if finish is not None:
            status.append("Finish: ", style="bold")
            status.append(f"{finish.coordinate}\n")

        violations = check_field(self.field)
        if violations:
            status.append(f"{len(violations)} rule violations!\n", style="bold red")
        status.append("\n")

        # Convert ANSI-colored track text to Rich Text properly
        status.append(Text.from_ansi(render(self.field)))
        status.append("\n\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  1 - 3x3 grid (easy)\n")
        status.append("  2 - 5x5 grid (medium)\n")
        status.append("  3 - 10x10 grid (hard)\n")
        status.append("  R - Regenerate track\n")
        status.append("  Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="Tilt Track Generator", border_style="green", width=80)

    def run(self) -> None:
        """Run the interactive demo."""
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())

                    key = readchar.readkey()

                    if key.lower() == 'q':
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key.lower() == 'r':
                        self.regenerate()
                    elif key in SIZE_KEYS:
                        self.choose_size(SIZE_KEYS[key])
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


if __name__ == "__main__":
    if len(sys.argv) > 2 and sys.argv[2] == 'sublime':
        # Running from IDE - just print one track
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
        print(render(generate(parse_grid_size(sys.argv[1]))))
    else:
        size = parse_grid_size(sys.argv[1] if len(sys.argv) > 1 else 'medium')
        InteractiveDemo(size).run()
