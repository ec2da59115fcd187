import logging

import pytest
from unittest.mock import MagicMock

import requests

from velocity_broadcast.config.settings import Settings
from velocity_broadcast.proxy import ConsolePlayer, ConsoleProxy, ConsoleSource


@pytest.fixture
def data_dir(tmp_path):
    """A plugin data directory that does not exist yet."""
    return tmp_path / "velocitybroadcast"


@pytest.fixture
def settings(data_dir):
    """An initialized Settings instance backed by a fresh config.yml."""
    settings_instance = Settings(str(data_dir), version="1.2")
    settings_instance.initialize()
    return settings_instance


@pytest.fixture
def make_response():
    """Factory for mocked `requests` responses."""

    def _make_response(text="1.2", status_code=200, raise_error=None):
        response = MagicMock()
        response.text = text
        response.status_code = status_code
        if raise_error is not None:
            response.raise_for_status.side_effect = raise_error
        elif status_code >= 400:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} Error"
            )
        return response

    return _make_response


@pytest.fixture
def players():
    return [
        ConsolePlayer(name="Steve"),
        ConsolePlayer(name="Alex", permissions=["vb.update"]),
    ]


@pytest.fixture
def proxy(players):
    return ConsoleProxy(players)


@pytest.fixture
def console():
    """The proxy console: holds every permission."""
    return ConsoleSource()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Removes handlers the CLI installs on the package logger between tests."""
    yield
    package_logger = logging.getLogger("velocity_broadcast")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
