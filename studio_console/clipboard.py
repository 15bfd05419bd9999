"""Process-local clipboard."""


class MemoryClipboard:
    """Keeps the last copied text in memory."""

    def __init__(self, text: str | None = None):
        self._text = text

    def get(self) -> str | None:
        return self._text

    def set(self, text: str) -> None:
        self._text = text

    def has(self) -> bool:
        return bool(self._text)
