"""Studio Console - command console for cartridge based game projects."""

__version__ = "0.1.0"

from studio_console.config import Config
from studio_console.console import Console
from studio_console.main import main

__all__ = ["Config", "Console", "main", "__version__"]
