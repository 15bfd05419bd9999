"""Filesystem commands and `cls`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from studio_console.collaborators import DirEntry
from studio_console.command_parser import CommandDescriptor
from studio_console.commands.registry import CommandSpec
from studio_console.continuation import Completion

if TYPE_CHECKING:
    from studio_console.console import Console

DELETE_CONFIRM = ["", "", "DO YOU REALLY WANT", "TO DELETE FILE?"]


def sort_entries(entries: list[DirEntry]) -> list[DirEntry]:
    """Folders first, then files, each group case-insensitively by name."""
    return sorted(entries, key=lambda entry: (not entry.is_dir, entry.name.casefold()))


def on_dir(console: Console, desc: CommandDescriptor) -> None:
    def on_listing(completion: Completion) -> None:
        if not completion.ok:
            console.print_error(f"\nerror: {completion.error}")
            console.done()
            return

        entries = sort_entries(completion.value or [])
        for entry in entries:
            console.print_line()
            if entry.is_dir:
                console.print_back(f"[{entry.name}]")
            else:
                console.print_front(entry.name)

        if not entries:
            console.print_back("\n\nuse ")
            console.print_front("DEMO")
            console.print_back(" command to install demo carts")

        console.print_line()
        console.done()

    console.print_line()
    pending = console.defer("enumerate", on_listing, path=console.fs.current_path())
    console.fs.enumerate(pending.complete)


def on_cd(console: Console, desc: CommandDescriptor) -> None:
    name = desc.param(0)
    if not name:
        console.print_error("\ninvalid dir name")
        console.done()
        return

    if name == "/":
        console.fs.home()
        console.done()
        return

    if name == "..":
        console.fs.back()
        console.done()
        return

    def on_checked(completion: Completion) -> None:
        if completion.ok and completion.value:
            console.fs.change_dir(name)
        else:
            console.print_error("\ndir doesn't exist")
        console.done()

    pending = console.defer("is_dir", on_checked, name=name)
    console.fs.is_dir_async(name, pending.complete)


def on_mkdir(console: Console, desc: CommandDescriptor) -> None:
    name = desc.param(0)
    if name and console.fs.make_dir(name):
        console.print_line()
        console.print_back(f"created [{name}] folder :)")
    else:
        console.print_error("\ninvalid dir name")
    console.done()


def on_folder(console: Console, desc: CommandDescriptor) -> None:
    console.print_back("\nStorage path:\n")
    console.print_front(console.fs.root_path())
    console.fs.open_folder()
    console.done()


def _delete_confirmed(console: Console, desc: CommandDescriptor) -> None:
    name = desc.param(0)
    fs = console.fs
    if not name:
        console.print_back("\nname is missing")
    elif fs.is_public_dir():
        console.print_error("\naccess denied")
    elif fs.is_dir(name):
        if fs.delete_dir(name):
            console.print_back("\ndir successfully deleted")
        else:
            console.print_back("\ndir not deleted")
    elif fs.delete_file(name):
        console.print_back("\nfile successfully deleted")
    else:
        console.print_back("\nfile not deleted")
    console.done()


def on_del(console: Console, desc: CommandDescriptor) -> None:
    console.confirm_command(DELETE_CONFIRM, lambda: _delete_confirmed(console, desc))


def on_cls(console: Console, desc: CommandDescriptor) -> None:
    console.clear_screen()


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="dir",
        alias="ls",
        help="show list of local files.",
        handler=on_dir,
    ),
    CommandSpec(
        name="cd",
        help="change directory.",
        usage="\ncd <path>\ncd /\ncd ..",
        handler=on_cd,
    ),
    CommandSpec(
        name="mkdir",
        help="make a directory.",
        usage="mkdir <name>",
        handler=on_mkdir,
    ),
    CommandSpec(
        name="folder",
        help="open working directory in OS.",
        handler=on_folder,
    ),
    CommandSpec(
        name="del",
        help="delete from the filesystem.",
        usage="del <file|folder>",
        handler=on_del,
    ),
    CommandSpec(
        name="cls",
        alias="clear",
        help="clear console screen.",
        handler=on_cls,
    ),
)
