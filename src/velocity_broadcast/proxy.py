# velocity_broadcast/proxy.py
"""The surface of the host proxy that VelocityBroadcast consumes.

The plugin never talks to a concrete proxy directly. It needs only four
things: the list of connected players, a way to send one of them (or any
command source) a message, a permission check, and command registration.
`CommandSource`, `Player` and `ProxyServer` describe exactly that, and the
host integration implements them.

`ConsoleProxy` is an in-process implementation used by the ``vbroadcast``
command-line tool, where the operator's terminal is the only real source.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import click

from velocity_broadcast.formatting import to_ansi

logger = logging.getLogger(__name__)


class CommandSource(ABC):
    """Anything that can run a command: a player or the proxy console."""

    name: str = "unknown"

    @abstractmethod
    def has_permission(self, permission: str) -> bool:
        """Whether this source holds `permission`."""

    @abstractmethod
    def send_message(self, message: str):
        """Delivers an already decorated message to this source."""


class Player(CommandSource):
    """A connected client session."""


CommandHandler = Callable[[CommandSource, List[str]], None]


@dataclass(frozen=True)
class CommandMeta:
    """Registration data for one top-level command."""

    name: str
    aliases: Tuple[str, ...] = ()
    permission: Optional[Callable[[CommandSource], bool]] = None

    @property
    def labels(self) -> Tuple[str, ...]:
        return (self.name,) + tuple(self.aliases)

    def is_allowed(self, source: CommandSource) -> bool:
        return self.permission is None or bool(self.permission(source))


class ProxyServer(ABC):
    """The host proxy as seen by the plugin."""

    @abstractmethod
    def get_all_players(self) -> List[Player]:
        """A snapshot of the currently connected players."""

    @abstractmethod
    def register_command(self, meta: CommandMeta, handler: CommandHandler):
        """Registers `handler` under the name and aliases of `meta`."""


# --- Console implementation ---


@dataclass(eq=False)
class ConsoleSource(CommandSource):
    """A command source that records messages and optionally echoes them.

    A `permissions` value of ``None`` grants every permission, which is how
    the proxy console itself behaves.
    """

    name: str = "CONSOLE"
    permissions: Optional[Iterable[str]] = None
    echo: bool = False
    messages: List[str] = field(default_factory=list)

    def has_permission(self, permission: str) -> bool:
        if self.permissions is None:
            return True
        return permission in set(self.permissions)

    def send_message(self, message: str):
        self.messages.append(message)
        if self.echo:
            click.echo(self._render(message))

    def _render(self, message: str) -> str:
        return to_ansi(message)


@dataclass(eq=False)
class ConsolePlayer(ConsoleSource, Player):
    """A simulated player; echoed messages are labelled with the player name."""

    permissions: Optional[Iterable[str]] = ()

    def _render(self, message: str) -> str:
        return f"[{self.name}] {to_ansi(message)}"


class ConsoleProxy(ProxyServer):
    """An in-process proxy with a static player list and a command table."""

    def __init__(self, players: Sequence[Player] = ()):
        self._players: List[Player] = list(players)
        self._commands: Dict[str, Tuple[CommandMeta, CommandHandler]] = {}

    def get_all_players(self) -> List[Player]:
        return list(self._players)

    def register_command(self, meta: CommandMeta, handler: CommandHandler):
        for label in meta.labels:
            key = label.lower()
            if key in self._commands:
                logger.warning(f"Command label '{label}' is already registered; replacing it.")
            self._commands[key] = (meta, handler)
        logger.debug(f"Registered command '{meta.name}' with aliases {list(meta.aliases)}.")

    @property
    def command_labels(self) -> List[str]:
        return sorted(self._commands)

    def dispatch(self, source: CommandSource, command_line: str) -> bool:
        """Runs a full command line (label plus arguments) as `source`.

        Returns:
            ``True`` if a registered command ran, ``False`` if the label is
            unknown or the source may not use the command.
        """
        tokens = command_line.split()
        if not tokens:
            return False

        label, arguments = tokens[0].lstrip("/").lower(), tokens[1:]
        entry = self._commands.get(label)
        if entry is None:
            source.send_message(f"§cUnknown command: {label}")
            return False

        meta, handler = entry
        if not meta.is_allowed(source):
            source.send_message("§cYou do not have permission to use this command.")
            return False

        handler(source, arguments)
        return True
