# velocity_broadcast/plugin.py
"""The VelocityBroadcast plugin: wires settings, update checks and commands."""
import logging
from concurrent.futures import Future
from typing import Optional

import requests

from velocity_broadcast.config.const import PLUGIN_VERSION, app_name_title
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.core.commands import CommandDispatcher
from velocity_broadcast.core.updates import UpdateChecker
from velocity_broadcast.plugins.plugin_base import PluginBase
from velocity_broadcast.proxy import Player, ProxyServer


class VelocityBroadcastPlugin(PluginBase):
    """Broadcasts prefixed messages to every player on the proxy.

    The plugin owns one `Settings` instance and hands it to the update
    checker and the command dispatcher at construction time.
    """

    version = PLUGIN_VERSION

    def __init__(
        self,
        proxy: ProxyServer,
        data_dir: str,
        logger: Optional[logging.Logger] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(
            app_name_title, proxy, logger or logging.getLogger("velocity_broadcast")
        )
        self.settings = Settings(data_dir, version=self.version)
        self.update_checker = UpdateChecker(
            self.settings, current_version=self.version, session=session
        )
        self.dispatcher = CommandDispatcher(self.settings, self.update_checker, proxy)

    def on_load(self):
        self.settings.initialize()
        self.dispatcher.register()

    def on_proxy_initialize(self) -> Optional[Future]:
        """Logs the active prefix and starts the startup update check in the background."""
        self.logger.info(
            f"{app_name_title} initialized with prefix: {self.settings.get_prefix()}"
        )
        return self.update_checker.submit_startup_check()

    def on_post_login(self, player: Player) -> Optional[Future]:
        if player is None:
            self.logger.warning("Player object is None during post-login.")
            return None
        return self.update_checker.submit_session_check(player)

    def on_unload(self):
        self.logger.info(f"{app_name_title} unloading.")
        self.update_checker.shutdown(wait=True)
