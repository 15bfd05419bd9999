"""Mouse-drag text selection over grid offsets."""

from __future__ import annotations

from dataclasses import dataclass

from studio_console.text_grid import TextGrid


@dataclass
class Selection:
    """Unordered pair of grid offsets; `active` while the button is held."""

    start: int = 0
    end: int = 0
    active: bool = False

    def press(self, offset: int) -> None:
        self.end = offset
        if not self.active:
            self.active = True
            self.start = offset

    def release(self) -> None:
        self.active = False

    def clear(self) -> None:
        self.start = self.end = 0
        self.active = False

    def bounds(self) -> tuple[int, int]:
        return (self.start, self.end) if self.start <= self.end else (self.end, self.start)

    @property
    def empty(self) -> bool:
        return self.start == self.end


def selection_text(grid: TextGrid, selection: Selection) -> str | None:
    """Selected cells as text, a newline at every row boundary crossed."""
    if selection.empty:
        return None

    low, high = selection.bounds()
    high = min(high, grid.capacity)
    parts: list[str] = []
    for offset in range(low, high):
        column = offset - low + low % grid.width
        if column and column % grid.width == 0:
            parts.append("\n")
        if grid.chars[offset]:
            parts.append(chr(grid.chars[offset]))
    return "".join(parts)
