"""Terminal front end: coloured echo, line input, confirmations and screen dumps."""

import asyncio
import atexit
from collections.abc import Callable
from pathlib import Path

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.prompt import Confirm
from rich.style import Style
from rich.text import Text

from studio_console.logging import get_logger
from studio_console.palette import hex_color
from studio_console.text_grid import TextGrid

log = get_logger(__name__)

HISTORY_PATH = Path("~/.studio-console/history").expanduser()


class TerminalView:
    """Mirrors console output to a terminal and reads command lines."""

    def __init__(self, out: RichConsole | None = None, err: RichConsole | None = None):
        self.out = out or RichConsole(highlight=False, soft_wrap=True)
        self.err = err or RichConsole(stderr=True, highlight=False)
        self._commands: list[str] = []
        self._readline = None
        self._history_file = HISTORY_PATH

    def setup_readline(self, commands: list[str]) -> None:
        """Set up line editing, history, and command completion."""
        self._commands = sorted(commands)
        try:
            import readline  # type: ignore
        except ImportError:
            return

        self._readline = readline
        try:
            self._history_file.parent.mkdir(parents=True, exist_ok=True)
            if self._history_file.exists():
                readline.read_history_file(str(self._history_file))
            readline.set_history_length(1000)
            readline.parse_and_bind("tab: complete")
            readline.set_completer(self._complete_command)
            atexit.register(self._save_history)
        except OSError as e:
            log.debug("Readline setup failed", error=str(e))

    def _save_history(self) -> None:
        """Persist readline history to disk."""
        if self._readline is None:
            return
        try:
            self._readline.write_history_file(str(self._history_file))
        except OSError as e:
            log.debug("Failed to save history", error=str(e))

    def _complete_command(self, text: str, state: int) -> str | None:
        """Readline completer for command names."""
        matches = [cmd for cmd in self._commands if cmd.startswith(text)]
        if state < len(matches):
            return matches[state]
        return None

    def echo(self, text: str, color: int) -> None:
        """Write console text in its palette colour."""
        self.out.print(Text(text, style=Style(color=hex_color(color))), end="")

    def print_error(self, error: str) -> None:
        """Print an error message."""
        self.err.print(Text(f"Error: {error}", style="bold red"))

    def log_line(self, line: str) -> None:
        """Show one rendered log line, dimmed, on the error stream."""
        self.err.print(Text.from_ansi(line, style="dim"))

    def prompt(self) -> str | None:
        """Read one command line; None at end of input."""
        try:
            return input("")
        except EOFError:
            return None

    async def prompt_async(self) -> str | None:
        return await asyncio.to_thread(self.prompt)

    def render_viewport(self, grid: TextGrid) -> Panel:
        """Visible console rows with their cell colours."""
        body = Text()
        for index, (row, colors) in enumerate(grid.viewport()):
            if index:
                body.append("\n")
            for ch, color in zip(row, colors):
                body.append(ch, style=Style(color=hex_color(color)))
        return Panel(body, title=f"rows {grid.scroll}-{grid.scroll + grid.height - 1}", expand=False)

    def dump_screen(self, grid: TextGrid) -> None:
        self.out.print()
        self.out.print(self.render_viewport(grid))


class RichConfirmation:
    """Yes/no dialog asked on the terminal without blocking the tick loop."""

    def __init__(self, out: RichConsole | None = None):
        self.out = out or RichConsole(highlight=False)
        self._tasks: set[asyncio.Task[None]] = set()

    def _question(self, lines: list[str]) -> str:
        return " ".join(line for line in lines if line).capitalize()

    def _ask(self, question: str) -> bool:
        try:
            return Confirm.ask(question, console=self.out, default=False)
        except (EOFError, KeyboardInterrupt):
            return False
        except Exception as e:
            log.error("Confirmation prompt failed", question=question, error=str(e))
            return False

    def request(self, lines: list[str], on_answer: Callable[[bool], None]) -> None:
        question = self._question(lines)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            on_answer(self._ask(question))
            return

        async def ask() -> None:
            on_answer(await asyncio.to_thread(self._ask, question))

        task = loop.create_task(ask())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


# Global view instance
_view: "TerminalView | None" = None


def get_view() -> TerminalView:
    """Get the global view instance."""
    global _view
    if _view is None:
        _view = TerminalView()
    return _view


def set_view(view: TerminalView) -> None:
    """Set the global view instance."""
    global _view
    _view = view
