"""
Tests for the configuration models and the INI-backed ConfigManager.
"""

import configparser

import pytest
from pydantic import ValidationError

from soundcloud_cli.exceptions import ConfigurationError
from soundcloud_cli.models.config import ClientConfig, DownloadConfig
from soundcloud_cli.storage.config_manager import ConfigManager


class TestClientConfig:
    def test_snapshot_is_immutable(self):
        config = ClientConfig(client_id="old")

        with pytest.raises(ValidationError):
            config.client_id = "new"

    def test_with_client_id_returns_a_new_snapshot(self):
        config = ClientConfig(client_id="old", max_attempts=5)

        updated = config.with_client_id("new")

        assert updated.client_id == "new"
        assert updated.max_attempts == 5
        assert config.client_id == "old"


class TestDownloadConfig:
    @pytest.mark.parametrize(
        "field, value",
        [
            ("max_workers", 0),
            ("max_workers", 33),
            ("max_attempts", 0),
            ("retry_delay", -1),
            ("offset", -1),
            ("limit", -5),
            ("output_template", "{artist}.{ext}"),
            ("output_template", "../{title}.{ext}"),
            ("output_template", "/abs/{title}.{ext}"),
            ("output_template", "{album} - {title}.{ext}"),
            ("output_template", "{title}"),
            ("output_template", "{} - {title}.{ext}"),
            ("output_template", "{title.{ext}"),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            DownloadConfig(config_path=".", **{field: value})

    @pytest.mark.parametrize(
        "template", ["{track_id}.{ext}", "{artist}/{title} [{track_id}].{ext}"]
    )
    def test_accepts_known_placeholders(self, template):
        config = DownloadConfig(config_path=".", output_template=template)

        assert config.output_template == template

    def test_client_config(self):
        config = DownloadConfig(
            config_path=".", client_id="abc", max_workers=4, retry_delay=0.25
        )

        snapshot = config.client_config()

        assert snapshot == ClientConfig(
            client_id="abc", max_workers=4, max_attempts=3, retry_delay=0.25
        )

    def test_ini_keys_exclude_session_fields(self):
        keys = DownloadConfig.get_ini_keys()

        assert "client_id" in keys
        assert "output_template" in keys
        assert not keys & {"config_path", "source_urls", "output_dir", "offset", "limit"}


class TestConfigManager:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager(tmp_path / "config.ini").load_config()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "soundcloud-cli" / "config.ini"
        ConfigManager(path).save_new_config({"client_id": "abc", "max_workers": 4})

        config = ConfigManager(path).load_config()

        assert config.client_id == "abc"
        assert config.max_workers == 4
        assert config.output_template == "{artist} - {title}.{ext}"
        assert config.no_m3u is False
        assert config.config_path == str(path.parent)

    def test_cli_options_override_file(self, tmp_path):
        path = tmp_path / "config.ini"
        ConfigManager(path).save_new_config({"client_id": "abc"})

        config = ConfigManager(path).load_config(
            {"max_workers": 2, "no_m3u": True, "source_urls": ["u"], "limit": 10}
        )

        assert config.max_workers == 2
        assert config.no_m3u is True
        assert config.source_urls == ["u"]
        assert config.limit == 10

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\nmax_workers = lots\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_out_of_range_value_in_file(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\nmax_workers = 99\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigManager(path).load_config()

    def test_missing_keys_are_migrated(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[DEFAULT]\nclient_id = abc\n", encoding="utf-8")

        config = ConfigManager(path).load_config()

        assert config.client_id == "abc"
        parser = configparser.ConfigParser(interpolation=None)
        parser.read(path, encoding="utf-8")
        assert parser["DEFAULT"]["max_attempts"] == "3"
        assert parser["DEFAULT"]["no_m3u"] == "false"

    def test_update_values(self, tmp_path):
        path = tmp_path / "config.ini"
        manager = ConfigManager(path)
        manager.save_new_config({"client_id": "old"})

        manager.update_values(client_id="new")

        assert ConfigManager(path).load_config().client_id == "new"
