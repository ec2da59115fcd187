# velocity_broadcast/__init__.py
from velocity_broadcast.config.const import PLUGIN_VERSION
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.core.commands import CommandDispatcher
from velocity_broadcast.core.updates import UpdateChecker, VersionCheckResult
from velocity_broadcast.plugin import VelocityBroadcastPlugin
from velocity_broadcast.plugins.plugin_base import PluginBase

__version__ = PLUGIN_VERSION

__all__ = [
    "__version__",
    "Settings",
    "CommandDispatcher",
    "UpdateChecker",
    "VersionCheckResult",
    "VelocityBroadcastPlugin",
    "PluginBase",
]
