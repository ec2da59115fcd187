# velocity_broadcast/plugins/plugin_base.py
"""Defines the base class for proxy plugins.

A plugin receives the host `ProxyServer` and a logger when it is constructed
and overrides the lifecycle hooks it cares about. The host integration calls
the hooks; the base implementations do nothing.
"""
from abc import ABC
from logging import Logger

from velocity_broadcast.proxy import Player, ProxyServer


class PluginBase(ABC):
    """The base class for plugins loaded into the proxy.

    Subclasses define a `version` class attribute and implement the hooks
    they need.
    """

    version: str = "N/A"

    def __init__(self, plugin_name: str, proxy: ProxyServer, logger: Logger):
        """Initializes the plugin instance.

        Args:
            plugin_name: The display name of the plugin.
            proxy: The host proxy the plugin runs in.
            logger: A logger dedicated to this plugin.
        """
        self.name = plugin_name
        self.proxy = proxy
        self.logger = logger

        self.version = getattr(self.__class__, "version", "N/A")

        self.logger.info(f"Plugin '{self.name}' v{self.version} initialized.")

    def on_load(self):
        """Called when the plugin is first loaded."""
        pass

    def on_unload(self):
        """Called when the proxy is shutting down or the plugin is reloaded."""
        pass

    def on_proxy_initialize(self):
        """Called once the proxy has finished starting up."""
        pass

    def on_post_login(self, player: Player):
        """Called after a player has logged in to the proxy."""
        pass
