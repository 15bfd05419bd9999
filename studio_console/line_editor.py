"""In-place editing of the active input line inside the text grid."""

from __future__ import annotations

from studio_console.text_grid import TextGrid


class LineEditor:
    """Edits the input line that starts at the grid cursor.

    The line has no buffer of its own: it is the run of non-empty cells
    from `grid.input_start`, and `grid.input_pos` is the edit offset.
    Inserting and deleting shift the cells (and their colours) in place.
    """

    def __init__(self, grid: TextGrid, input_color: int):
        self.grid = grid
        self.input_color = input_color

    @property
    def pos(self) -> int:
        return self.grid.input_pos

    @pos.setter
    def pos(self, value: int) -> None:
        self.grid.input_pos = value

    def text(self) -> str:
        return self.grid.string_at(self.grid.input_start)

    def __len__(self) -> int:
        return len(self.text())

    def home(self) -> None:
        self.pos = 0

    def end(self) -> None:
        self.pos = len(self)

    def left(self) -> None:
        if self.pos > 0:
            self.pos -= 1

    def right(self) -> None:
        self.pos = min(self.pos + 1, len(self))

    def delete(self) -> None:
        """Remove the character under the edit position."""
        grid = self.grid
        offset = grid.input_start + self.pos
        tail = len(self) - self.pos
        if tail <= 0:
            return

        end = offset + tail
        grid.chars[offset:end - 1] = grid.chars[offset + 1:end]
        grid.chars[end - 1] = 0
        grid.colors[offset:end - 1] = grid.colors[offset + 1:end]

    def backspace(self) -> None:
        if self.pos > 0:
            self.left()
            self.delete()

    def insert(self, text: str) -> bool:
        """Insert text at the edit position.

        Returns False, leaving the grid untouched, when the grown line would
        not fit before the end of the buffer.
        """
        size = len(text)
        if not size:
            return True

        grid = self.grid
        length = len(self)
        if grid.input_start + length + size >= grid.capacity:
            return False

        offset = grid.input_start + self.pos
        tail = length - self.pos
        grid.chars[offset + size:offset + size + tail] = grid.chars[offset:offset + tail]
        grid.colors[offset + size:offset + size + tail] = grid.colors[offset:offset + tail]
        grid.chars[offset:offset + size] = text.encode("ascii", errors="replace")
        grid.colors[offset:offset + size] = bytes([self.input_color]) * size
        self.pos += size

        grid.reveal_row((grid.input_start + self.pos) // grid.width)
        return True

    def clear(self) -> None:
        """Blank the input cells and reset the edit position."""
        start = self.grid.input_start
        length = len(self)
        self.grid.chars[start:start + length] = bytes(length)
        self.pos = 0

    def load(self, text: str) -> None:
        """Replace the line with `text` and move the edit position to its end."""
        self.clear()
        self.insert(text)

    def replace_last_token(self, value: str) -> None:
        """Replace everything after the last space with `value`."""
        line = self.text()
        token_start = line.rfind(" ") + 1
        self.pos = token_start
        start = self.grid.input_start + token_start
        stale = len(line) - token_start
        self.grid.chars[start:start + stale] = bytes(stale)
        self.insert(value)

    def cursor_cell(self) -> tuple[int, int]:
        """Grid `(col, row)` of the edit position."""
        offset = self.grid.input_start + self.pos
        return offset % self.grid.width, offset // self.grid.width
