"""Interactive command console: input handling, dispatch and deferred completion."""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from studio_console import __version__
from studio_console.cartridge import Cartridge, ChunkCodec
from studio_console.clipboard import MemoryClipboard
from studio_console.collaborators import (
    CartridgeCodec,
    Clipboard,
    ConfirmationUI,
    FileSystem,
    NetEvent,
    Network,
    StudioHost,
)
from studio_console.command_parser import CommandDescriptor, parse_command, split_commands
from studio_console.commands import get_command_registry
from studio_console.commands.cart import load_demo
from studio_console.commands.reference import PRODUCT_NAME
from studio_console.commands.registry import CommandRegistry, Handler
from studio_console.config import Config, get_config
from studio_console.continuation import (
    Completion,
    CompletionHandler,
    ConsoleState,
    ContinuationScheduler,
    PendingAsync,
    ProgressHandler,
)
from studio_console.exceptions import CartridgeError, StartupCartError
from studio_console.history import History
from studio_console.keys import ClipboardAction, InputEvent, Key, KeyPress, MouseState, TextInput
from studio_console.line_editor import LineEditor
from studio_console.logging import get_logger
from studio_console.selection import Selection, selection_text
from studio_console.text_grid import EchoSink, TextGrid

log = get_logger(__name__)

VERSION_URL = "/api?fn=version"
VERSION_ROW = 1

_VERSION_FIELD = re.compile(r"\b(major|minor|patch)\s*=\s*(\d+)")


def parse_version(text: str) -> tuple[int, int, int] | None:
    """Read `major=.. minor=.. patch=..` from a version response."""
    fields = {name: int(value) for name, value in _VERSION_FIELD.findall(text)}
    if "major" not in fields or "minor" not in fields:
        return None
    return fields["major"], fields["minor"], fields.get("patch", 0)


def _current_version() -> tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r"\d+", __version__)[:3])


def printable(text: str) -> str:
    return "".join(ch for ch in text if " " <= ch <= "~")


@dataclass
class RomInfo:
    """Name of the cart file the console last loaded or saved."""

    name: str = ""


class Console:
    """Scrollback console that parses and runs one command at a time.

    Every frame the host calls `tick()` with that frame's input events.
    A command handler either calls `done()` before returning or registers
    a continuation with `defer()`; until that continuation runs and calls
    `done()`, keyboard input is ignored. Collaborator callbacks are queued
    and delivered on a later tick.
    """

    def __init__(
        self,
        *,
        fs: FileSystem,
        studio: StudioHost,
        codec: CartridgeCodec | None = None,
        net: Network | None = None,
        clipboard: Clipboard | None = None,
        confirm: ConfirmationUI | None = None,
        config: Config | None = None,
        registry: CommandRegistry | None = None,
        cli: bool = False,
        commands: str | None = None,
        skip: bool = False,
        echo: EchoSink | None = None,
    ):
        self.config = config or get_config()
        self.colors = self.config.colors
        settings = self.config.console

        self.fs = fs
        self.studio = studio
        self.codec = codec or ChunkCodec()
        self.net = net
        self.clipboard = clipboard or MemoryClipboard()
        self.confirm = confirm
        self.registry = registry or get_command_registry()
        self.cli = cli
        self.skip = skip

        self.grid = TextGrid(
            settings.width,
            settings.height,
            settings.screens,
            background=self.colors.background,
            wrap_color=self.colors.wrap,
            echo=echo,
        )
        self.editor = LineEditor(self.grid, self.colors.input)
        self.history = History()
        self.selection = Selection()
        self.scheduler = ContinuationScheduler()
        self.descriptor: CommandDescriptor | None = None
        self.rom = RomInfo()

        self.tick_count = 0
        self.finished = False
        self._state = ConsoleState.BUSY
        self._started = False
        self._cursor_delay = 0
        self._command_failed = False
        self._run_countdown = 0
        self._startup_cart = False
        self._batch: deque[str] = deque(split_commands(commands or ""))

    # State

    @property
    def state(self) -> ConsoleState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConsoleState.READY

    @property
    def is_busy(self) -> bool:
        return self._state is not ConsoleState.READY

    @property
    def has_queued_commands(self) -> bool:
        return bool(self._batch)

    def cursor_visible(self) -> bool:
        period = max(self.config.console.blink_period, 1)
        return self._cursor_delay > 0 or self.tick_count % period < period // 2

    def set_rom(self, name: str) -> None:
        self.rom.name = name

    # Output

    def print(self, text: str, color: int, wrap_indent: int = 0) -> None:
        self.grid.print(text, color, wrap_indent)

    def print_back(self, text: str) -> None:
        self.print(text, self.colors.back)

    def print_front(self, text: str) -> None:
        self.print(text, self.colors.front)

    def print_error(self, text: str) -> None:
        self._command_failed = True
        self.print(text, self.colors.error)

    def print_line(self) -> None:
        self.print("\n", self.colors.front)

    def print_table(self, text: str) -> None:
        self.grid.print_table(text, self.colors.wrap, self.colors.front)

    def restart_line(self) -> None:
        """Move the cursor to column 0 so the next print overwrites the row."""
        self.grid.cursor_x = 0
        self.grid.input_pos = 0

    def trace(self, text: str, color: int | None = None) -> None:
        """Runtime output: print a line and finish the running command."""
        self.print(text, self.colors.front if color is None else color)
        self.print_line()
        if self.is_busy and self.scheduler.idle:
            self.done()

    def error(self, text: str | None) -> None:
        """Runtime error: print it and finish the running command."""
        self.print_error(text or "unknown error")
        if self.is_busy and self.scheduler.idle:
            self.done()

    def clear_screen(self) -> None:
        self.grid.clear()
        self.selection.clear()
        self.done(new_line=False)

    # Command lifecycle

    def done(self, new_line: bool = True) -> None:
        """Finish the running command and show a fresh prompt."""
        if not self.cli:
            if new_line:
                self.print_line()
            path = self.fs.current_path()
            if path:
                self.print_back(path)
            self.print_front(self.config.console.prompt)

        self._state = ConsoleState.READY
        self.selection.clear()
        self.descriptor = None

    def execute(self, line: str) -> None:
        """Parse and dispatch one command line."""
        self._state = ConsoleState.BUSY
        self._command_failed = False
        self.selection.clear()

        desc = parse_command(line)
        self.descriptor = desc
        if desc.command is None:
            self.done()
            return

        spec = self.registry.lookup(desc.command)
        if spec is None:
            log.info("Unknown command", command=desc.command)
            self.print_line()
            self.print_error("unknown command:")
            self.print_error(desc.command)
            self.done()
            return

        log.debug("Dispatching command", command=spec.name, params=len(desc.params))
        self.run_handler(spec.handler, desc)

    def run_handler(self, handler: Handler, desc: CommandDescriptor) -> None:
        """Invoke a handler; errors are reported and end the command."""
        self.descriptor = desc
        try:
            handler(self, desc)
        except Exception as e:
            log.error("Command failed", command=desc.command, error=str(e), exc_info=True)
            self._abort(f"\nerror: {e}")
            return

        if self._state is ConsoleState.BUSY and self.scheduler.idle:
            log.warning("Command returned without completing", command=desc.command)
            self.done()

    def _abort(self, message: str) -> None:
        self.scheduler.discard()
        self.print_error(message)
        self.done()

    def defer(
        self,
        kind: str,
        on_complete: CompletionHandler,
        *,
        on_progress: ProgressHandler | None = None,
        **payload: Any,
    ) -> PendingAsync:
        """Keep the console busy until the returned continuation is completed."""
        pending = self.scheduler.begin(kind, on_complete, on_progress=on_progress, **payload)
        self._state = ConsoleState.BUSY
        return pending

    def fetch(
        self,
        url: str,
        on_complete: CompletionHandler,
        *,
        on_progress: Callable[[NetEvent], None] | None = None,
        **payload: Any,
    ) -> PendingAsync:
        """Deferred network GET; completes with the response body."""
        pending = self.defer("net_get", on_complete, on_progress=on_progress, url=url, **payload)

        def on_event(event: NetEvent) -> None:
            if event.kind == "progress":
                pending.notify(event)
            elif event.kind == "error":
                pending.fail(event.error or "download failed")
            else:
                pending.resolve(event.data)

        if self.net is None:
            pending.fail("network is not available")
            return pending
        try:
            self.net.get(url, on_event)
        except Exception as e:
            log.error("Network request failed to start", url=url, error=str(e))
            pending.fail(str(e))
        return pending

    def confirm_command(self, rows: list[str], on_yes: Callable[[], None]) -> None:
        """Ask before a destructive action; batch mode always declines."""
        if self.cli or self.confirm is None:
            for row in rows:
                self.print_error(row)
                self.print_line()
            self.done()
            return

        def on_answer(completion: Completion) -> None:
            if completion.ok and completion.value:
                on_yes()
            else:
                self.done()

        pending = self.defer("confirm", on_answer, lines=list(rows))
        try:
            self.confirm.request(list(rows), pending.resolve)
        except Exception as e:
            log.error("Confirmation request failed", error=str(e))
            pending.fail(str(e))

    # Startup

    def load_startup_cart(self, path: Path | str) -> None:
        """Load the cart named on the command line; it runs once the console starts."""
        path = Path(path)
        try:
            cart = self.codec.load(path.read_bytes())
        except (OSError, CartridgeError) as e:
            log.error("Startup cart failed", path=str(path), error=str(e))
            raise StartupCartError(str(path), str(e)) from e

        self.studio.load_cart(cart)
        self.studio.rom_loaded()
        self.set_rom(path.name)
        self._startup_cart = True

    def _start(self) -> None:
        self._started = True
        config_cart = self.config.storage.config_cart
        if self.fs.load_root(config_cart) is None:
            self.fs.save_root(config_cart, self.codec.save(Cartridge.new(self.config.console.default_script)))

        if self._startup_cart:
            if not self.cli:
                self.print_back(" loading cart...")
            self._run_countdown = 1 if self.skip else self.config.console.fps
            return

        load_demo(self, self.config.console.default_script)
        if not self.cli:
            self.print_front(f" {PRODUCT_NAME} {__version__}\n")
            self.print_back("\n hello! type ")
            self.print_front("help")
            self.print_back(" for help\n")
            if self.config.net.check_new_version:
                self._check_version()
        self.done()

    def _advance_startup_run(self) -> None:
        if self._run_countdown <= 0:
            return
        self._run_countdown -= 1
        if self._run_countdown == 0:
            self.print_line()
            self.done()
            self.studio.run()

    def _check_version(self) -> None:
        if self.net is None:
            return

        def on_event(event: NetEvent) -> None:
            if event.kind == "done":
                self.scheduler.call_soon(lambda: self._version_received(event.data))
            elif event.kind == "error":
                log.info("Version check failed", error=event.error)

        try:
            self.net.get(VERSION_URL, on_event)
        except Exception as e:
            log.warning("Version check failed to start", error=str(e))

    def _version_received(self, data: bytes) -> None:
        latest = parse_version(data.decode("utf-8", errors="replace"))
        if latest is None or latest <= _current_version():
            return
        major, minor, patch = latest
        self.grid.write_row(VERSION_ROW, f" new version {major}.{minor}.{patch} available", self.colors.error)

    # Input

    def insert_input(self, text: str) -> None:
        self.editor.insert(text)
        self.selection.clear()

    def _load_input(self, text: str) -> None:
        self.editor.load(text)
        self.selection.clear()

    def submit(self) -> None:
        text = self.editor.text()
        self.editor.end()
        if text:
            self.history.append(text)
        self.execute(text)

    def complete_input(self) -> None:
        """Tab completion of a command name or, after a space, a file name."""
        text = self.editor.text()
        if not text:
            return

        if " " not in text:
            spec = self.registry.complete(text)
            if spec is not None:
                self.editor.end()
                self.insert_input(spec.name[len(text):])
            return

        prefix = text[text.rfind(" ") + 1:]
        if not prefix:
            return

        def on_listing(completion: Completion) -> None:
            if completion.ok:
                for entry in completion.value or []:
                    if entry.name.startswith(prefix):
                        self.editor.replace_last_token(entry.name)
                        break
            self.editor.end()
            self._state = ConsoleState.READY

        pending = self.defer("complete", on_listing, prefix=prefix)
        try:
            self.fs.enumerate(pending.complete)
        except Exception as e:
            log.error("Listing for completion failed", prefix=prefix, error=str(e))
            pending.fail(str(e))

    def copy_selection(self) -> None:
        text = selection_text(self.grid, self.selection)
        if text:
            self.clipboard.set(text)
        self.selection.clear()

    def paste_clipboard(self) -> None:
        if self.clipboard.has():
            text = printable(self.clipboard.get() or "")
            if text:
                self.insert_input(text)

    def _middle_click(self) -> None:
        text = selection_text(self.grid, self.selection)
        if text:
            self.insert_input(printable(text))
            self.clipboard.set(text)
        else:
            self.paste_clipboard()

    def _process_mouse(self, event: MouseState) -> None:
        grid = self.grid
        step = self.config.console.wheel_step
        if event.wheel:
            grid.set_scroll(grid.scroll + (-step if event.wheel > 0 else step))

        if 0 <= event.col < grid.width and 0 <= event.row < grid.height:
            if event.left:
                offset = event.col + (event.row + grid.scroll) * grid.width
                self.selection.press(min(offset, grid.capacity - 1))
            else:
                self.selection.release()

        if event.middle_click:
            self._middle_click()

    def _process_key(self, event: KeyPress) -> None:
        editor = self.editor
        key = event.key

        if event.ctrl:
            if key is Key.K:
                self.clear_screen()
            return

        if key is Key.UP:
            text = self.history.recall_previous(editor.text())
            if text is not None:
                self._load_input(text)
        elif key is Key.DOWN:
            self._load_input(self.history.recall_next())
        elif key is Key.LEFT:
            editor.left()
        elif key is Key.RIGHT:
            editor.right()
        elif key is Key.HOME:
            editor.home()
        elif key is Key.END:
            editor.end()
        elif key is Key.DELETE:
            editor.delete()
        elif key is Key.BACKSPACE:
            editor.backspace()
        elif key is Key.TAB:
            self.complete_input()
        elif key is Key.RETURN:
            self.submit()
        elif key is Key.PAGE_UP:
            self.grid.set_scroll(self.grid.scroll - self.grid.height // 2)
        elif key is Key.PAGE_DOWN:
            self.grid.set_scroll(self.grid.scroll + self.grid.height // 2)

    def _process_keyboard(self, events: list[InputEvent]) -> None:
        for event in events:
            if isinstance(event, MouseState):
                continue
            if not self.is_ready:
                return

            self._cursor_delay = self.config.console.keystroke_delay
            if isinstance(event, KeyPress):
                self._process_key(event)
            elif isinstance(event, TextInput):
                text = printable(event.text)
                if text:
                    self.insert_input(text)
            elif isinstance(event, ClipboardAction):
                if event.action == "copy":
                    self.copy_selection()
                else:
                    self.paste_clipboard()

    # Tick

    def _deliver(self) -> None:
        for notice in self.scheduler.drain_notices():
            try:
                notice()
            except Exception as e:
                log.error("Background notice failed", error=str(e), exc_info=True)

        for pending, item in self.scheduler.drain():
            if isinstance(item, Completion):
                self._complete(pending, item)
            elif pending.on_progress is not None:
                try:
                    pending.on_progress(item)
                except Exception as e:
                    log.error("Progress handler failed", kind=pending.kind, error=str(e), exc_info=True)

    def _complete(self, pending: PendingAsync, completion: Completion) -> None:
        self._state = ConsoleState.COMPLETING
        log.debug("Continuation resolved", kind=pending.kind, ok=completion.ok, error=completion.error)
        try:
            pending.on_complete(completion)
        except Exception as e:
            log.error("Continuation failed", kind=pending.kind, error=str(e), exc_info=True)
            self._abort(f"\nerror: {e}")
            return

        if self._state is ConsoleState.COMPLETING and self.scheduler.idle:
            log.warning("Continuation returned without completing", kind=pending.kind)
            self.done()

    def _process_batch(self) -> None:
        if self._batch and self._command_failed:
            log.info("Batch stopped after error", skipped=len(self._batch))
            self._batch.clear()

        if self._batch:
            line = self._batch.popleft()
            if not self.cli:
                self.print_front(line)
            self.execute(line)
            return

        if self.cli and self.is_ready and self._run_countdown == 0:
            self.finished = True

    def tick(self, events: Iterable[InputEvent] = ()) -> None:
        """Advance one frame: input, deferred results, startup and batch commands."""
        events = list(events)

        # Results queued since the last frame; anything deferred below waits a tick.
        self._deliver()

        if not self._started:
            self._start()

        for event in events:
            if isinstance(event, MouseState):
                self._process_mouse(event)

        self._process_keyboard(events)
        self._advance_startup_run()

        if self._cursor_delay > 0:
            self._cursor_delay -= 1

        if self.is_ready:
            self._process_batch()

        self.tick_count += 1
