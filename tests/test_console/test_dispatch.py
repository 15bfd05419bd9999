import pytest

from studio_console.commands import get_command_registry
from studio_console.commands.registry import CommandRegistry, CommandSpec
from studio_console.continuation import Completion, ConsoleState
from studio_console.exceptions import ConsoleBusyError
from studio_console.filesystem import LocalFileSystem
from studio_console.keys import Key, KeyPress, TextInput


class HeldListingFileSystem(LocalFileSystem):
    """Folder listings wait until the test releases them."""

    def __init__(self, root):
        super().__init__(root)
        self.waiting = []

    def enumerate(self, on_done) -> None:
        self.waiting.append(on_done)


def _type_line(console, line: str) -> None:
    console.tick([TextInput(line), KeyPress(Key.RETURN)])


def _with_commands(*specs: CommandSpec) -> CommandRegistry:
    base = get_command_registry()
    return CommandRegistry(base.commands + specs, base.api)


def test_help_commands_lists_every_command_once(make_console):
    console = make_console()

    _type_line(console, "help commands")

    assert console.is_ready
    assert console.descriptor is None
    listing = " ".join(console.grid.text().split("Console commands:")[1].split())
    names = console.registry.command_names()
    assert " ".join(names) in listing
    for name in names:
        assert listing.split().count(name) == 1


def test_unknown_command_is_reported_in_error_colour(make_console):
    console = make_console()

    _type_line(console, "frobnicate now")

    assert console.is_ready
    assert "unknown command:frobnicate" in console.grid.text()
    offset = console.grid.chars.find(b"frobnicate", console.grid.chars.find(b"unknown"))
    assert console.grid.colors[offset] == console.colors.error


def test_empty_line_just_shows_a_new_prompt(make_console):
    console = make_console()
    rows_before = console.grid.cursor_y

    _type_line(console, "")

    assert console.is_ready
    assert console.grid.cursor_y == rows_before + 1
    assert console.grid.text().endswith(">")


def test_alias_runs_the_command_ignoring_case(make_console, studio):
    console = make_console()

    _type_line(console, "QUIT")

    assert studio.exit_requested
    assert console.is_ready


def test_continuation_runs_on_a_later_tick(make_console):
    seen = []

    def on_wait(console, desc):
        def finish(completion: Completion) -> None:
            seen.append((completion.value, console.state))
            console.done()

        console.defer("wait", finish).resolve(42)

    console = make_console(registry=_with_commands(CommandSpec(name="wait", help="", handler=on_wait)))

    _type_line(console, "wait")
    assert seen == []
    assert console.state is ConsoleState.BUSY

    console.tick()
    assert seen == [(42, ConsoleState.COMPLETING)]
    assert console.is_ready


def test_progress_events_arrive_before_the_result(make_console):
    events = []

    def on_fetch(console, desc):
        pending = console.defer(
            "fetch",
            lambda completion: (events.append("done"), console.done()),
            on_progress=lambda item: events.append(item),
        )
        pending.notify(50)
        pending.notify(100)
        pending.resolve()

    console = make_console(registry=_with_commands(CommandSpec(name="fetch", help="", handler=on_fetch)))

    _type_line(console, "fetch")
    console.tick()

    assert events == [50, 100, "done"]
    assert console.is_ready


def test_continuation_may_defer_again(make_console):
    def on_chain(console, desc):
        def second(completion: Completion) -> None:
            console.print_back("\nsecond step")
            console.done()

        def first(completion: Completion) -> None:
            console.defer("second", second).resolve()

        console.defer("first", first).resolve()

    console = make_console(registry=_with_commands(CommandSpec(name="chain", help="", handler=on_chain)))

    _type_line(console, "chain")
    console.tick()
    assert console.is_busy

    console.tick()
    assert console.is_ready
    assert "second step" in console.grid.text()


def test_handler_error_is_printed_and_console_recovers(make_console):
    def on_boom(console, desc):
        raise RuntimeError("bad handler")

    console = make_console(registry=_with_commands(CommandSpec(name="boom", help="", handler=on_boom)))

    _type_line(console, "boom")

    assert console.is_ready
    assert "error: bad handler" in console.grid.text()


def test_continuation_error_does_not_deadlock(make_console):
    def on_boom(console, desc):
        def explode(completion: Completion) -> None:
            raise ValueError("kaput")

        console.defer("boom", explode).resolve()

    console = make_console(registry=_with_commands(CommandSpec(name="boom", help="", handler=on_boom)))

    _type_line(console, "boom")
    console.tick()

    assert console.is_ready
    assert console.scheduler.idle
    assert "error: kaput" in console.grid.text()


def test_handler_that_never_completes_is_finished_for_it(make_console):
    console = make_console(
        registry=_with_commands(CommandSpec(name="lazy", help="", handler=lambda console, desc: None))
    )

    _type_line(console, "lazy")

    assert console.is_ready


def test_continuation_that_never_completes_is_finished_for_it(make_console):
    def on_lazy(console, desc):
        console.defer("lazy", lambda completion: None).resolve()

    console = make_console(registry=_with_commands(CommandSpec(name="lazy", help="", handler=on_lazy)))

    _type_line(console, "lazy")
    console.tick()

    assert console.is_ready


def test_keys_are_ignored_while_busy(make_console, storage):
    fs = HeldListingFileSystem(storage)
    console = make_console(fs=fs)

    _type_line(console, "dir")
    console.tick([TextInput("abc"), KeyPress(Key.RETURN)])

    assert console.is_busy
    assert "abc" not in console.grid.text()
    assert len(fs.waiting) == 1

    fs.waiting[0](Completion.success([]))
    console.tick()

    assert console.is_ready
    assert "DEMO" in console.grid.text()


def test_second_deferral_is_rejected(make_console, storage):
    console = make_console(fs=HeldListingFileSystem(storage))
    _type_line(console, "dir")

    with pytest.raises(ConsoleBusyError) as exc_info:
        console.defer("other", lambda completion: None)

    assert exc_info.value.outstanding == "enumerate"


def test_failed_listing_reports_the_error(make_console, storage):
    fs = HeldListingFileSystem(storage)
    console = make_console(fs=fs)
    _type_line(console, "dir")

    fs.waiting[0](Completion.failure("disk gone"))
    console.tick()

    assert console.is_ready
    assert "error: disk gone" in console.grid.text()


def test_ctrl_k_clears_the_screen(make_console):
    console = make_console()
    _type_line(console, "help")

    console.tick([KeyPress(Key.K, ctrl=True)])

    assert console.grid.text() == ">"
    assert console.is_ready


def test_history_is_recalled_with_arrow_keys(make_console):
    console = make_console()
    _type_line(console, "help version")

    console.tick([TextInput("he")])
    console.tick([KeyPress(Key.UP)])
    assert console.editor.text() == "help version"

    console.tick([KeyPress(Key.DOWN)])
    assert console.editor.text() == "he"


def test_eval_needs_a_script_engine(make_console):
    console = make_console()

    _type_line(console, "eval 1+1")

    assert console.is_ready
    assert "'eval' not implemented for the script" in console.grid.text()


def test_trace_finishes_the_running_command(make_console):
    def on_run_code(console, desc):
        console.defer("script", lambda completion: console.trace("HELLO"))
        console.scheduler.pending.resolve()

    console = make_console(registry=_with_commands(CommandSpec(name="script", help="", handler=on_run_code)))

    _type_line(console, "script")
    console.tick()

    assert console.is_ready
    assert "HELLO" in console.grid.text()
