"""`help` command and the topics it can show."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from studio_console import __version__
from studio_console.command_parser import CommandDescriptor
from studio_console.commands.reference import (
    LICENSE_TEXT,
    PRODUCT_NAME,
    RAM_LAYOUT,
    SPEC_ROWS,
    STARTUP_OPTIONS,
    TERMS_TEXT,
    VRAM_LAYOUT,
    WELCOME_TEXT,
    format_layout_table,
)
from studio_console.commands.registry import CommandRegistry, CommandSpec

if TYPE_CHECKING:
    from studio_console.console import Console

HELP_USAGE = "help [<text>|version|welcome|spec|ram|vram|commands|api|startup|terms|license]"


def print_command_usage(console: Console, name: str) -> bool:
    """Print the help block of command `name`; False if there is none."""
    spec = console.registry.command(name)
    if spec is None:
        return False

    colors = console.colors
    console.print("\n---=== COMMAND ===---\n", colors.command_header)
    console.print_back(spec.help)
    if spec.usage:
        console.print_front("\n\nusage: ")
        console.print_back(spec.usage)
    console.print_line()
    return True


def print_usage_for(console: Console, desc: CommandDescriptor) -> None:
    """Usage of the command being run, whichever name or alias was typed."""
    spec = console.registry.lookup(desc.command or "")
    if spec is not None:
        print_command_usage(console, spec.name)


def print_api_usage(console: Console, name: str) -> bool:
    item = console.registry.api_item(name)
    if item is None:
        return False

    colors = console.colors
    console.print_line()
    console.print("---=== API ===---\n", colors.api_header)
    console.print(item.signature, colors.api_definition)
    console.print_front("\n\n")
    console.print_back(item.help)
    console.print_line()
    return True


def print_help_banner(console: Console) -> None:
    console.print_front("\n\nusage: ")
    console.print_back(HELP_USAGE)
    console.print_back("\n\ntype ")
    console.print_front("help commands")
    console.print_back(" to show commands")
    console.print_back("\n\npress ")
    console.print_front("ESC")
    console.print_back(" to enter UI mode\n")


def _help_version(console: Console) -> None:
    console.print_back(f"\n{PRODUCT_NAME} {__version__}")


def _help_welcome(console: Console) -> None:
    console.print_line()
    console.print_back(WELCOME_TEXT)
    console.print_line()


def _help_spec(console: Console) -> None:
    console.print_line()
    for section, info in SPEC_ROWS:
        console.print(f"{section:<8}{info}\n", console.colors.back, 8)


def _help_ram(console: Console) -> None:
    console.print_table(format_layout_table(RAM_LAYOUT))


def _help_vram(console: Console) -> None:
    console.print_table(format_layout_table(VRAM_LAYOUT))


def _help_commands(console: Console) -> None:
    console.print("\nConsole commands:\n", console.colors.command_header)
    console.print_back(" ".join(console.registry.command_names()))
    console.print_line()


def _help_api(console: Console) -> None:
    console.print("\nAPI functions:\n", console.colors.api_header)
    console.print_back(" ".join(console.registry.api_names()))
    console.print_line()


def _help_startup(console: Console) -> None:
    console.print_front("\nStartup options:\n")
    for name, text in STARTUP_OPTIONS:
        console.print(f"--{name:<12}{text}\n", console.colors.back, 14)


def _help_terms(console: Console) -> None:
    console.print_line()
    console.print_back(TERMS_TEXT)
    console.print_line()


def _help_license(console: Console) -> None:
    console.print_line()
    console.print_back(LICENSE_TEXT)
    console.print_line()


HELP_TOPICS: dict[str, Callable[[Console], None]] = {
    "version": _help_version,
    "welcome": _help_welcome,
    "spec": _help_spec,
    "ram": _help_ram,
    "vram": _help_vram,
    "commands": _help_commands,
    "api": _help_api,
    "startup": _help_startup,
    "terms": _help_terms,
    "license": _help_license,
}


def on_help(console: Console, desc: CommandDescriptor) -> None:
    topic = desc.param(0)
    if topic:
        found = print_command_usage(console, topic)
        found = print_api_usage(console, topic) or found
        show_topic = HELP_TOPICS.get(topic)
        if show_topic is not None:
            show_topic(console)
            found = True
        if not found:
            print_help_banner(console)
    else:
        print_help_banner(console)

    console.done()


def build_help_markdown(registry: CommandRegistry) -> str:
    """Full command and API reference as Markdown."""
    lines = [f"# {PRODUCT_NAME} {__version__}", "", "## Welcome", "", WELCOME_TEXT, ""]

    lines += ["## Specification", "", "| | |", "|---|---|"]
    lines += [f"| {section} | {info} |" for section, info in SPEC_ROWS]
    lines.append("")

    lines += ["## Console commands", ""]
    for spec in registry.commands:
        title = f"### {spec.name}" + (f" ({spec.alias})" if spec.alias else "")
        lines += [title, "", spec.help.strip(), ""]
        if spec.usage:
            lines += ["```", f"usage: {spec.usage.strip()}", "```", ""]

    lines += ["## API", ""]
    for item in registry.api:
        lines += [f"### {item.name}", "", "```", item.signature, "```", "", item.help, ""]

    lines += ["## Startup options", "", "```"]
    lines += [f"--{name:<12}{text}" for name, text in STARTUP_OPTIONS]
    lines += ["```", ""]

    lines += ["## RAM", "", "```", format_layout_table(RAM_LAYOUT).strip(), "```", ""]
    lines += ["## VRAM", "", "```", format_layout_table(VRAM_LAYOUT).strip(), "```", ""]
    lines += [TERMS_TEXT, "", LICENSE_TEXT, ""]
    return "\n".join(lines)


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        name="help",
        help="show help info about commands/api/...",
        usage=HELP_USAGE,
        handler=on_help,
    ),
)
