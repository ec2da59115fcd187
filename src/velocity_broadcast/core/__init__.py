from .commands import Action, CommandDispatcher, ParsedCommand, parse_arguments
from .updates import UNKNOWN_VERSION, UpdateChecker, VersionCheckResult

__all__ = [
    "Action",
    "CommandDispatcher",
    "ParsedCommand",
    "parse_arguments",
    "UNKNOWN_VERSION",
    "UpdateChecker",
    "VersionCheckResult",
]
