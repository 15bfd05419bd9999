"""Custom exceptions for Studio Console."""


class StudioConsoleError(Exception):
    """Base exception for Studio Console."""

    pass


class ConsoleBusyError(StudioConsoleError):
    """A deferred operation was started while another one is outstanding."""

    def __init__(self, requested: str, outstanding: str):
        super().__init__(
            f"Cannot defer '{requested}': '{outstanding}' is still pending"
        )
        self.requested = requested
        self.outstanding = outstanding


class CartridgeError(StudioConsoleError):
    """Cartridge data could not be decoded or encoded."""

    pass


class FileSystemError(StudioConsoleError):
    """Virtual filesystem errors."""

    pass


class PathEscapeError(FileSystemError):
    """A name resolved outside the storage root."""

    def __init__(self, name: str):
        super().__init__(f"Path escapes storage root: {name}")
        self.name = name


class StartupCartError(StudioConsoleError):
    """Cart requested on the command line failed to load."""

    def __init__(self, path: str, reason: str = ""):
        super().__init__(f"error: cart `{path}` not loaded")
        self.path = path
        self.reason = reason
