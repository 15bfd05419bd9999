"""Tokenizer for console command lines."""

from __future__ import annotations

from dataclasses import dataclass, field

COMMAND_SEPARATOR = " & "


@dataclass(frozen=True)
class CommandParam:
    """One `key[=value]` token."""

    key: str
    value: str | None = None


@dataclass(frozen=True)
class CommandDescriptor:
    """Parsed command line: the command token and its parameters.

    `source` is the line as submitted; it is dropped together with the
    descriptor once the command completes.
    """

    source: str
    command: str | None = None
    params: tuple[CommandParam, ...] = field(default_factory=tuple)

    def param(self, index: int) -> str | None:
        """Key of the parameter at `index`, or None."""
        if 0 <= index < len(self.params):
            return self.params[index].key
        return None

    def value(self, key: str) -> str | None:
        for param in self.params:
            if param.key == key:
                return param.value
        return None

    def tail(self) -> str:
        """Raw text after the command token, spaces preserved."""
        if self.command is None:
            return ""
        stripped = self.source.lstrip(" ")
        return stripped[len(self.command):].strip(" ")


def parse_command(line: str) -> CommandDescriptor:
    """Split a line on spaces into a command and `key=value` parameters.

    Repeated spaces produce no empty tokens. A parameter without `=`, or
    with nothing after it, has no value.
    """
    tokens = [token for token in line.split(" ") if token]
    if not tokens:
        return CommandDescriptor(source=line)

    params = []
    for token in tokens[1:]:
        key, _, value = token.partition("=")
        params.append(CommandParam(key=key, value=value or None))

    return CommandDescriptor(source=line, command=tokens[0], params=tuple(params))


def split_commands(text: str) -> list[str]:
    """Split a batch string into individual command lines."""
    return [part.strip() for part in text.split(COMMAND_SEPARATOR) if part.strip()]
