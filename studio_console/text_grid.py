"""Fixed-capacity character/colour grid with wrapping print and scrollback."""

from __future__ import annotations

from typing import Callable

from studio_console.palette import Color

EchoSink = Callable[[str, int], None]

TABLE_FRAME_CHARS = "+|-"


def is_wrap_char(ch: str) -> bool:
    """Whitespace and pipe characters are line-break opportunities."""
    return ch == "|" or ch.isspace()


def _sanitize(text: str) -> str:
    return text.encode("ascii", errors="replace").decode("ascii")


class TextGrid:
    """Scrollback buffer of `width * height * screens` cells.

    Characters and colours live in two parallel bytearrays of equal length;
    a cell at `(col, row)` is addressed as `row * width + col`. A zero byte
    marks an empty cell. The cursor is where the next print starts; the
    active input line begins at the cursor and `input_pos` is the edit
    offset inside it.
    """

    def __init__(
        self,
        width: int = 40,
        height: int = 17,
        screens: int = 64,
        *,
        background: int = Color.BLACK,
        wrap_color: int = Color.DARK_GREY,
        echo: EchoSink | None = None,
    ):
        self.width = width
        self.height = height
        self.screens = screens
        self.background = background
        self.wrap_color = wrap_color
        self.echo = echo
        self.chars = bytearray(self.capacity)
        self.colors = bytearray([background]) * self.capacity
        self.cursor_x = 0
        self.cursor_y = 0
        self.scroll = 0
        self.input_pos = 0

    @property
    def rows(self) -> int:
        return self.height * self.screens

    @property
    def capacity(self) -> int:
        return self.width * self.rows

    @property
    def max_scroll(self) -> int:
        return self.rows - self.height

    def cursor_offset(self) -> int:
        return self.cursor_x + self.cursor_y * self.width

    @property
    def input_start(self) -> int:
        """Offset of the first cell of the active input line."""
        return self.cursor_offset()

    def _next_line(self) -> None:
        self.cursor_x = 0
        self.cursor_y += 1

    def _shift_up(self, count: int = 1) -> None:
        """Drop the first `count` rows and blank the freed rows at the end."""
        size = self.width * min(count, self.rows)
        self.chars[: self.capacity - size] = self.chars[size:]
        self.chars[self.capacity - size:] = bytes(size)
        self.colors[: self.capacity - size] = self.colors[size:]
        self.colors[self.capacity - size:] = bytes([self.background]) * size

    def fit_cursor(self) -> None:
        """Scroll the buffer until the cursor row exists, then keep it visible."""
        while self.cursor_y >= self.rows:
            self._shift_up()
            self.cursor_y -= 1
        self.reveal_row(self.cursor_y)

    def reveal_row(self, row: int) -> None:
        """Raise the scroll offset so `row` is inside the viewport."""
        min_scroll = row - self.height + 1
        if self.scroll < min_scroll:
            self.scroll = min(min_scroll, self.max_scroll)

    def set_scroll(self, value: int) -> None:
        """Move the viewport, clamped to the printed area and the buffer end."""
        if value != self.scroll:
            self.scroll = min(max(0, min(value, self.cursor_y)), self.max_scroll)

    def put(self, offset: int, ch: str, color: int) -> None:
        if 0 <= offset < self.capacity:
            self.chars[offset] = ord(ch) & 0x7F
            self.colors[offset] = color

    def print(self, text: str, color: int, wrap_indent: int = 0) -> None:
        """Append text at the cursor, word wrapping with a hanging indent.

        A run of non-wrap characters that does not fit the rest of the row
        moves to the next row at `wrap_indent`, unless it is longer than a
        whole row. Wrap characters are drawn in the muted wrap colour.
        After printing, the input line restarts at the cursor.
        """
        if self.echo is not None:
            self.echo(text, color)

        text = _sanitize(text)
        indent = min(max(wrap_indent, 0), self.width - 1)

        start = self.cursor_offset() + self.input_pos
        self.cursor_x = start % self.width
        self.cursor_y = start // self.width

        runs = [0] * (len(text) + 1)
        for index in range(len(text) - 1, -1, -1):
            runs[index] = 0 if is_wrap_char(text[index]) else runs[index + 1] + 1

        for index, ch in enumerate(text):
            self.fit_cursor()

            if ch == "\n":
                self._next_line()
                continue

            wrap = is_wrap_char(ch)
            starts_run = index == 0 or is_wrap_char(text[index - 1])
            if not wrap and starts_run:
                remaining = self.width - runs[index]
                if 0 < remaining <= self.cursor_x:
                    self._next_line()
                    self.cursor_x = indent

            self.put(self.cursor_offset(), ch, self.wrap_color if wrap else color)

            self.cursor_x += 1
            if self.cursor_x >= self.width:
                self._next_line()

        self.fit_cursor()
        self.input_pos = 0

    def print_table(self, text: str, frame_color: int, text_color: int) -> None:
        """Print pre-formatted table text; frame characters use `frame_color`."""
        if self.echo is not None:
            self.echo(text, text_color)

        for ch in _sanitize(text):
            self.fit_cursor()
            if ch == "\n":
                self._next_line()
                continue
            color = frame_color if ch in TABLE_FRAME_CHARS else text_color
            self.put(self.cursor_offset(), ch, color)
            self.cursor_x += 1
            if self.cursor_x >= self.width:
                self._next_line()

        self.fit_cursor()
        self.input_pos = 0

    def write_row(self, row: int, text: str, color: int) -> None:
        """Overwrite a whole row in place without moving the cursor."""
        if not 0 <= row < self.rows:
            return
        start = row * self.width
        line = _sanitize(text)[: self.width].ljust(self.width)
        self.chars[start:start + self.width] = line.encode("ascii")
        self.colors[start:start + self.width] = bytes([color]) * self.width

    def clear(self) -> None:
        """Blank every cell and home the cursor and viewport."""
        self.chars[:] = bytes(self.capacity)
        self.colors[:] = bytes([self.background]) * self.capacity
        self.scroll = 0
        self.cursor_x = 0
        self.cursor_y = 0
        self.input_pos = 0

    def string_at(self, offset: int) -> str:
        """Text from `offset` up to the first empty cell."""
        if not 0 <= offset < self.capacity:
            return ""
        end = self.chars.find(0, offset)
        if end < 0:
            end = self.capacity
        return self.chars[offset:end].decode("ascii")

    def cell(self, offset: int) -> str:
        return chr(self.chars[offset]) if self.chars[offset] else ""

    def row_text(self, row: int) -> str:
        """Row contents with empty cells shown as spaces, right-trimmed."""
        start = row * self.width
        raw = self.chars[start:start + self.width].replace(b"\0", b" ")
        return raw.decode("ascii").rstrip()

    def text(self, first_row: int = 0, last_row: int | None = None) -> str:
        """Rows joined by newlines, trailing blank rows dropped."""
        last = self.cursor_y if last_row is None else last_row
        lines = [self.row_text(row) for row in range(first_row, min(last, self.rows - 1) + 1)]
        return "\n".join(lines).rstrip("\n")

    def viewport(self) -> list[tuple[str, bytes]]:
        """Visible rows as `(text, colors)` pairs, `height` entries long."""
        rows = []
        for row in range(self.scroll, self.scroll + self.height):
            start = row * self.width
            raw = self.chars[start:start + self.width].replace(b"\0", b" ")
            rows.append((raw.decode("ascii"), bytes(self.colors[start:start + self.width])))
        return rows
