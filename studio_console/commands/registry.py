"""Command and API reference tables."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from studio_console.command_parser import CommandDescriptor
from studio_console.logging import get_logger

if TYPE_CHECKING:
    from studio_console.console import Console

log = get_logger(__name__)

Handler = Callable[["Console", CommandDescriptor], None]


@dataclass(frozen=True)
class CommandSpec:
    """Static description of one console command."""

    name: str
    help: str
    handler: Handler
    usage: str | None = None
    alias: str | None = None


@dataclass(frozen=True)
class ApiItem:
    """Runtime API function or callback listed by `help api`."""

    name: str
    signature: str
    help: str


class CommandRegistry:
    """Sorted, read-only command and API tables."""

    def __init__(self, commands: Iterable[CommandSpec], api: Iterable[ApiItem] = ()):
        self.commands: tuple[CommandSpec, ...] = tuple(sorted(commands, key=lambda spec: spec.name))
        self.api: tuple[ApiItem, ...] = tuple(sorted(api, key=lambda item: item.name))
        log.debug("Built command table", commands=len(self.commands), api=len(self.api))

    def lookup(self, name: str) -> CommandSpec | None:
        """Case-insensitive match on command name or alias."""
        wanted = name.casefold()
        for spec in self.commands:
            if spec.name.casefold() == wanted or (spec.alias and spec.alias.casefold() == wanted):
                return spec
        return None

    def command(self, name: str) -> CommandSpec | None:
        for spec in self.commands:
            if spec.name == name:
                return spec
        return None

    def api_item(self, name: str) -> ApiItem | None:
        for item in self.api:
            if item.name == name:
                return item
        return None

    def complete(self, prefix: str) -> CommandSpec | None:
        """First command, in table order, whose name starts with `prefix`."""
        for spec in self.commands:
            if spec.name.startswith(prefix):
                return spec
        return None

    def command_names(self) -> list[str]:
        return [spec.name for spec in self.commands]

    def api_names(self) -> list[str]:
        return [item.name for item in self.api]
