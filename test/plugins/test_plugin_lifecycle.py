import logging
import os
from unittest.mock import MagicMock

import pytest

from velocity_broadcast.config.const import PLUGIN_VERSION
from velocity_broadcast.core.updates import VersionCheckResult
from velocity_broadcast.plugin import VelocityBroadcastPlugin
from velocity_broadcast.proxy import ConsolePlayer


@pytest.fixture
def session(make_response):
    http = MagicMock()
    http.get.return_value = make_response("9.9")
    return http


@pytest.fixture
def plugin(proxy, data_dir, session):
    instance = VelocityBroadcastPlugin(proxy, str(data_dir), session=session)
    instance.on_load()
    yield instance
    instance.on_unload()


def test_on_load_creates_settings_and_registers_commands(plugin, proxy, data_dir):
    assert plugin.version == PLUGIN_VERSION
    assert os.path.isfile(os.path.join(str(data_dir), "config.yml"))
    assert "vbroadcast" in proxy.command_labels


def test_collaborators_share_one_settings_instance(plugin):
    assert plugin.update_checker.settings is plugin.settings
    assert plugin.dispatcher.settings is plugin.settings


def test_on_proxy_initialize_logs_prefix_and_checks(plugin, session, caplog):
    caplog.set_level(logging.INFO)

    future = plugin.on_proxy_initialize()

    assert future.result(timeout=5) == VersionCheckResult("9.9", False)
    assert "initialized with prefix" in caplog.text
    session.get.assert_called_once()


def test_startup_check_disabled(plugin, session):
    plugin.settings.set_update_check_enabled(False)

    future = plugin.on_proxy_initialize()

    assert future.result(timeout=5) is None
    session.get.assert_not_called()


def test_post_login_notifies_update_viewers(plugin):
    admin = ConsolePlayer(name="Alex", permissions=["vb.update"])

    plugin.on_post_login(admin).result(timeout=5)

    assert len(admin.messages) == 1
    assert "9.9" in admin.messages[0]


def test_post_login_reuses_startup_result(plugin, session):
    plugin.on_proxy_initialize().result(timeout=5)
    admin = ConsolePlayer(name="Alex", permissions=["vb.update"])

    assert plugin.on_post_login(admin) is None

    assert "9.9" in admin.messages[0]
    session.get.assert_called_once()


def test_post_login_ignores_regular_players(plugin, session):
    assert plugin.on_post_login(ConsolePlayer(name="Steve")) is None
    session.get.assert_not_called()


def test_post_login_without_player(plugin, caplog):
    assert plugin.on_post_login(None) is None
    assert "Player object is None" in caplog.text


def test_unload_joins_worker(plugin):
    plugin.on_proxy_initialize()
    plugin.on_unload()
    assert plugin.update_checker.submit(lambda: None) is None
