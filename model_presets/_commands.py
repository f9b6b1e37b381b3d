"""Slash command registry, argument parsing, and dispatch."""

from __future__ import annotations

import inspect
import re
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from model_presets.display import console


# -- Types -----------------------------------------------------------------


@dataclass(frozen=True)
class SlashCommand:
    """A registered slash command.

    The handler receives the named arguments (``key=value`` tokens) and the
    remaining unnamed argument text.
    """

    name: str
    description: str
    handler: Callable[[dict[str, str], str], Awaitable[Any] | Any]


# Leading ``key=value`` tokens; everything after them is the unnamed argument.
_NAMED_ARG = re.compile(r"(\w+)=(\S+)(?:\s+|$)")


def parse_arguments(text: str) -> tuple[dict[str, str], str]:
    """Split ``quiet=true Creative Writer`` into ({'quiet': 'true'}, 'Creative Writer')."""
    named: dict[str, str] = {}
    rest = text.strip()
    while True:
        match = _NAMED_ARG.match(rest)
        if match is None:
            break
        named[match.group(1)] = match.group(2)
        rest = rest[match.end():]
    return named, rest.strip()


def quiet_arguments() -> dict[str, str]:
    """Named arguments for non-interactive command execution."""
    return {"quiet": "true"}


async def _call(cmd: SlashCommand, named: dict[str, str], unnamed: str) -> Any:
    result = cmd.handler(named, unnamed)
    if inspect.isawaitable(result):
        result = await result
    return result


# -- Registry --------------------------------------------------------------


class CommandRegistry:
    """Name → SlashCommand table with a built-in /help."""

    def __init__(self) -> None:
        self._commands: dict[str, SlashCommand] = {}
        self.register(SlashCommand("help", "List available slash commands", self._cmd_help))

    def register(self, command: SlashCommand) -> None:
        self._commands[command.name.lower()] = command

    def get(self, name: str) -> SlashCommand | None:
        return self._commands.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._commands

    def __iter__(self) -> Iterator[SlashCommand]:
        return iter(self._commands.values())

    async def execute(self, name: str, named_args: dict[str, str] | None = None, unnamed: str = "") -> Any:
        """Run a command by name. Raises KeyError for unknown commands."""
        cmd = self.get(name)
        if cmd is None:
            raise KeyError(name)
        return await _call(cmd, named_args or {}, unnamed)

    async def dispatch(self, raw_input: str) -> tuple[bool, Any]:
        """Route slash-command input to the appropriate handler.

        Returns (handled, result):
          - handled=False → input was not a slash command
          - handled=True  → command ran (or was unknown); result is its return value
        """
        if not raw_input.startswith("/"):
            return False, None

        parts = raw_input[1:].split(maxsplit=1)
        name = parts[0].lower() if parts else ""
        named, unnamed = parse_arguments(parts[1] if len(parts) > 1 else "")

        cmd = self.get(name)
        if cmd is None:
            console.print(f"[bold red]Unknown command:[/bold red] /{name}")
            console.print("[dim]Type /help to see available commands.[/dim]")
            return True, None

        return True, await _call(cmd, named, unnamed)

    async def _cmd_help(self, args: dict[str, str], value: str) -> None:
        """List available slash commands."""
        from rich.table import Table

        table = Table(title="Slash Commands", border_style="accent", expand=False)
        table.add_column("Command", style="accent")
        table.add_column("Description")
        for cmd in self:
            table.add_row(f"/{cmd.name}", cmd.description)
        console.print(table)
        return None
