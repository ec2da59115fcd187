import os

import pytest

from velocity_broadcast.config.schema import DEFAULT_PREFIX, HEADER
from velocity_broadcast.config.settings import Settings
from velocity_broadcast.error import ConfigIOError, ConfigurationError

LEGACY_CONFIG = (
    "# DO NOT EDIT\n"
    "Plugin Version: '1.0 Pre-Release'\n"
    "update-check-enabled: false\n"
    "prefix: '&a[Hub]&r '\n"
)


def _read(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def test_initialize_creates_directory_and_default_file(data_dir):
    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    assert os.path.isfile(settings.config_path)
    assert _read(settings.config_path).startswith(HEADER)
    assert settings.get_prefix() == DEFAULT_PREFIX + " "
    assert settings.is_update_check_enabled() is True
    assert settings.is_debug_enabled() is False
    assert settings.get("Plugin Version") == "1.2"


def test_initialize_migrates_legacy_file(data_dir):
    data_dir.mkdir()
    (data_dir / "config.yml").write_text(LEGACY_CONFIG, encoding="utf-8")

    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    assert settings.is_update_check_enabled() is False
    assert settings.get_prefix() == "&a[Hub]&r "
    text = _read(settings.config_path)
    assert "Plugin Version: '1.2'" in text
    assert "version-check-enabled: false" in text
    assert "update-check-enabled" not in text
    assert "debug-messages-enabled: false" in text


def test_migration_is_recorded(data_dir):
    data_dir.mkdir()
    (data_dir / "config.yml").write_text(LEGACY_CONFIG, encoding="utf-8")

    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    report = settings.last_migration
    assert report.from_version == "1.0 Pre-Release"
    assert report.to_version == "1.2"
    assert report.preserved_keys == ["prefix", "update-check-enabled"]

    settings.reload()
    assert settings.last_migration is None


def test_initialize_twice_leaves_file_byte_identical(data_dir):
    data_dir.mkdir()
    (data_dir / "config.yml").write_text(LEGACY_CONFIG, encoding="utf-8")

    Settings(str(data_dir), version="1.2").initialize()
    first = _read(data_dir / "config.yml")
    Settings(str(data_dir), version="1.2").initialize()
    second = _read(data_dir / "config.yml")

    assert first == second


def test_current_file_is_not_rewritten(data_dir):
    data_dir.mkdir()
    hand_edited = "Plugin Version: '1.2'\nprefix: '[Edited]'\n"
    (data_dir / "config.yml").write_text(hand_edited, encoding="utf-8")

    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    assert _read(settings.config_path) == hand_edited
    assert settings.get_prefix() == "[Edited] "
    # Missing keys are default-filled in memory.
    assert settings.is_update_check_enabled() is True


@pytest.mark.parametrize("prefix", ["[Lobby]", "[Lobby] ", "[Lobby]   ", "&c&lALERT&r\t"])
def test_get_prefix_has_exactly_one_trailing_space(settings, prefix):
    settings.set_prefix(prefix)
    assert settings.get_prefix() == prefix.rstrip() + " "


def test_set_prefix_persists_immediately(settings, data_dir):
    settings.set_prefix("[Lobby]")

    reopened = Settings(str(data_dir), version="1.2")
    reopened.initialize()
    assert reopened.get_prefix() == "[Lobby] "


def test_repeated_prefix_edits_do_not_accumulate_whitespace(settings):
    for _ in range(3):
        settings.set_prefix(settings.get_prefix())
        settings.reload()
    assert settings.get_prefix() == DEFAULT_PREFIX + " "


def test_reload_picks_up_manual_edits(settings):
    with open(settings.config_path, "w", encoding="utf-8") as f:
        f.write("Plugin Version: '1.2'\nprefix: '[Manual]'\nversion-check-enabled: false\n")

    settings.reload()

    assert settings.get_prefix() == "[Manual] "
    assert settings.is_update_check_enabled() is False


def test_reload_recreates_deleted_file(settings):
    settings.set_prefix("[Gone]")
    os.remove(settings.config_path)

    settings.reload()

    assert os.path.isfile(settings.config_path)
    assert settings.get_prefix() == DEFAULT_PREFIX + " "


def test_corrupt_file_uses_defaults_and_is_left_alone(data_dir, caplog):
    data_dir.mkdir()
    corrupt = "prefix: [unclosed\n"
    (data_dir / "config.yml").write_text(corrupt, encoding="utf-8")

    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    assert settings.get_prefix() == DEFAULT_PREFIX + " "
    assert _read(settings.config_path) == corrupt
    assert "Could not load settings" in caplog.text


def test_non_utf8_file_uses_defaults_and_is_left_alone(data_dir, caplog):
    data_dir.mkdir()
    latin1 = "Plugin Version: '1.2'\nprefix: '\u00a79[Hub]'\n".encode("latin-1")
    (data_dir / "config.yml").write_bytes(latin1)

    settings = Settings(str(data_dir), version="1.2")
    settings.initialize()

    assert settings.get_prefix() == DEFAULT_PREFIX + " "
    assert (data_dir / "config.yml").read_bytes() == latin1
    assert "not valid UTF-8" in caplog.text

    settings.set_prefix("[Changed]")
    (data_dir / "config.yml").write_bytes(latin1)
    settings.reload()

    assert settings.get_prefix() == DEFAULT_PREFIX + " "


def test_read_config_reports_bad_encoding_as_config_io_error(data_dir):
    data_dir.mkdir()
    (data_dir / "config.yml").write_bytes(b"prefix: '\xa79'\n")
    settings = Settings(str(data_dir), version="1.2")

    with pytest.raises(ConfigIOError):
        settings._read_config()


def test_failed_write_keeps_in_memory_value(settings, mocker, caplog):
    mocker.patch.object(
        settings, "_write_config", side_effect=ConfigIOError(settings.config_path)
    )

    settings.set_prefix("[Unsaved]")

    assert settings.get_prefix() == "[Unsaved] "
    assert "In-memory settings remain active" in caplog.text


def test_write_failure_is_reported_as_config_io_error(settings, mocker):
    mocker.patch(
        "velocity_broadcast.config.settings.tempfile.mkstemp",
        side_effect=PermissionError("read-only"),
    )
    with pytest.raises(ConfigIOError):
        settings._write_config()


def test_unwritable_data_dir_does_not_raise(tmp_path, mocker, caplog):
    mocker.patch(
        "velocity_broadcast.config.settings.os.makedirs",
        side_effect=PermissionError("denied"),
    )
    settings = Settings(str(tmp_path / "blocked"), version="1.2")

    settings.initialize()

    assert settings.get_prefix() == DEFAULT_PREFIX + " "
    assert "Could not create data directory" in caplog.text


def test_set_update_check_enabled(settings, data_dir):
    settings.set_update_check_enabled(False)

    reopened = Settings(str(data_dir), version="1.2")
    reopened.initialize()
    assert reopened.is_update_check_enabled() is False


def test_set_rejects_unknown_and_version_keys(settings):
    with pytest.raises(ConfigurationError):
        settings.set("colour", "blue")
    with pytest.raises(ConfigurationError):
        settings.set("Plugin Version", "9.9")


def test_as_dict_returns_copy(settings):
    snapshot = settings.as_dict()
    snapshot["prefix"] = "changed"
    assert settings.get("prefix") == DEFAULT_PREFIX
