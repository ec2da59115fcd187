# velocity_broadcast/core/commands.py
"""Decodes ``/vbroadcast`` arguments into actions and carries them out.

Only the first argument token is checked for a subcommand, case-insensitively.
Anything else, including no arguments at all, is broadcast text. A broadcast
whose first word is ``prefix``, ``reload`` or ``checkupdates`` is therefore
read as that subcommand; use the full sentence with another first word to
broadcast it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from velocity_broadcast.config.const import (
    COMMAND_ALIASES,
    COMMAND_NAME,
    PERMISSION_ADMIN,
    PERMISSION_BROADCAST,
    PERMISSION_PREFIX,
    PERMISSION_UPDATE,
    PREFIX_COMMAND_ALIASES,
    PREFIX_COMMAND_NAME,
)
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.core.updates import UpdateChecker
from velocity_broadcast.error import (
    MissingArgumentError,
    PermissionDeniedError,
    UserInputError,
)
from velocity_broadcast.formatting import colorize, strip_codes
from velocity_broadcast.proxy import CommandMeta, CommandSource, ProxyServer

logger = logging.getLogger(__name__)


class Action(Enum):
    """Administrative actions, each with its subcommand keyword and permission."""

    SET_PREFIX = ("prefix", PERMISSION_PREFIX)
    RELOAD = ("reload", PERMISSION_ADMIN)
    CHECK_UPDATES = ("checkupdates", PERMISSION_UPDATE)
    BROADCAST = (None, PERMISSION_BROADCAST)

    def __init__(self, keyword: Optional[str], permission: str):
        self.keyword = keyword
        self.permission = permission


_SUBCOMMANDS: Dict[str, Action] = {
    action.keyword: action for action in Action if action.keyword is not None
}


@dataclass(frozen=True)
class ParsedCommand:
    action: Action
    text: str


def parse_arguments(arguments: Sequence[str]) -> ParsedCommand:
    """Maps whitespace-split argument tokens to an action and its text.

    Examples:
        ``["prefix", "[Lobby]"]`` -> ``SET_PREFIX`` with ``"[Lobby]"``
        ``["Hello", "world"]`` -> ``BROADCAST`` with ``"Hello world"``
        ``[]`` -> ``BROADCAST`` with ``""``
    """
    tokens = list(arguments)
    if tokens:
        action = _SUBCOMMANDS.get(tokens[0].lower())
        if action is not None:
            return ParsedCommand(action, " ".join(tokens[1:]))
    return ParsedCommand(Action.BROADCAST, " ".join(tokens))


class CommandDispatcher:
    """Runs parsed commands against the settings, update checker and proxy."""

    def __init__(
        self,
        settings: Settings,
        update_checker: UpdateChecker,
        proxy: ProxyServer,
    ):
        self.settings = settings
        self.update_checker = update_checker
        self.proxy = proxy
        self._handlers: Dict[Action, Callable[[CommandSource, str], None]] = {
            Action.SET_PREFIX: self._set_prefix,
            Action.RELOAD: self._reload,
            Action.CHECK_UPDATES: self._check_updates,
            Action.BROADCAST: self._broadcast,
        }

    def register(self):
        """Registers the main command and the standalone prefix command."""
        self.proxy.register_command(
            CommandMeta(COMMAND_NAME, COMMAND_ALIASES, self.has_any_permission),
            self.execute,
        )
        self.proxy.register_command(
            CommandMeta(
                PREFIX_COMMAND_NAME,
                PREFIX_COMMAND_ALIASES,
                lambda source: source.has_permission(PERMISSION_PREFIX),
            ),
            self.execute_prefix,
        )
        logger.info(
            f"Registered commands '{COMMAND_NAME}' {list(COMMAND_ALIASES)} and "
            f"'{PREFIX_COMMAND_NAME}' {list(PREFIX_COMMAND_ALIASES)}."
        )

    @staticmethod
    def has_any_permission(source: CommandSource) -> bool:
        return any(source.has_permission(action.permission) for action in Action)

    def execute(self, source: CommandSource, arguments: List[str]):
        """Entry point for ``/vbroadcast <arguments>``."""
        self.dispatch(source, parse_arguments(arguments))

    def execute_prefix(self, source: CommandSource, arguments: List[str]):
        """Entry point for ``/vbroadcastprefix <text>``."""
        self.dispatch(source, ParsedCommand(Action.SET_PREFIX, " ".join(arguments)))

    def dispatch(self, source: CommandSource, command: ParsedCommand):
        logger.info(
            f"{command.action.name} executed by: {getattr(source, 'name', type(source).__name__)}"
        )
        logger.info(f"Arguments: {strip_codes(command.text)}")
        try:
            if not source.has_permission(command.action.permission):
                raise PermissionDeniedError(command.action.permission)
            self._handlers[command.action](source, command.text)
        except UserInputError as e:
            logger.debug(f"Rejected {command.action.name}: {e}")
            self._reply(source, f"&c{e.message}")

    def _reply(self, source: CommandSource, text: str):
        source.send_message(colorize(text))

    def _set_prefix(self, source: CommandSource, text: str):
        if not text.strip():
            raise MissingArgumentError("Please provide a new prefix.")
        self.settings.set_prefix(text)
        self._reply(source, f"{self.settings.get_prefix()}Prefix updated to: &f{text}")

    def _reload(self, source: CommandSource, text: str):
        self.settings.reload()
        self._reply(source, f"{self.settings.get_prefix()}Configuration reloaded.")

    def _check_updates(self, source: CommandSource, text: str):
        prefix = self.settings.get_prefix()
        self._reply(source, f"{prefix}Checking for updates...")
        result = self.update_checker.fetch_latest_version()
        if self.update_checker.notify_if_stale(result, source):
            return
        if result.is_known:
            self._reply(
                source,
                f"{prefix}You are using the latest version (&f{result.latest_version}&r).",
            )

    def _broadcast(self, source: CommandSource, text: str):
        if not text.strip():
            raise MissingArgumentError("Please provide a message to broadcast.")

        prefix = self.settings.get_prefix()
        delivered = 0
        for player in self.proxy.get_all_players():
            try:
                player.send_message(colorize(prefix + text))
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Could not deliver broadcast to '{getattr(player, 'name', player)}': {e}"
                )
        logger.debug(f"Broadcast delivered to {delivered} player(s).")
        self._reply(source, f"{prefix}Message broadcasted: &f{text}")
