"""Submitted-line history with up/down recall."""

from __future__ import annotations


class History:
    """Ordered list of submitted lines and a recall index.

    The index ranges over `[0, len(entries)]`; `len(entries)` is the fresh
    line past the newest entry. Leaving the fresh line keeps its text as a
    draft that is given back when recall returns there.
    """

    def __init__(self) -> None:
        self.entries: list[str] = []
        self.index = 0
        self._draft = ""

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, line: str) -> None:
        if not self.entries or self.entries[-1] != line:
            self.entries.append(line)
        self.index = len(self.entries)
        self._draft = ""

    def recall_previous(self, current: str) -> str | None:
        """Step back one entry; None when already at the oldest."""
        if self.index <= 0:
            return None
        if self.index == len(self.entries):
            self._draft = current
        self.index -= 1
        return self.entries[self.index]

    def recall_next(self) -> str:
        """Step forward one entry; past the newest entry yields the draft."""
        if self.index < len(self.entries) - 1:
            self.index += 1
            return self.entries[self.index]
        if self.index == len(self.entries):
            return ""
        self.index = len(self.entries)
        draft, self._draft = self._draft, ""
        return draft
