"""Console command table."""

from studio_console.commands import cart, files, help, transfer
from studio_console.commands.reference import API_ITEMS
from studio_console.commands.registry import ApiItem, CommandRegistry, CommandSpec

_registry: CommandRegistry | None = None


def build_command_registry() -> CommandRegistry:
    """Assemble every command module's table into one sorted registry."""
    commands = help.COMMANDS + cart.COMMANDS + files.COMMANDS + transfer.COMMANDS
    return CommandRegistry(commands, API_ITEMS)


def get_command_registry() -> CommandRegistry:
    """Get the process-wide registry, building it on first use."""
    global _registry
    if _registry is None:
        _registry = build_command_registry()
    return _registry


__all__ = [
    "ApiItem",
    "CommandRegistry",
    "CommandSpec",
    "build_command_registry",
    "get_command_registry",
]
