"""Tests for configuration loading and precedence."""

import logging
import os

from args import parse_args
from cli_config import load_configuration, setup_runtime
from common.host import bin_dir, hvm_home
from constants import Constants, _load_yaml_config, apply_config


def write_config(tmp_path, body):
    path = tmp_path / "hvm.yaml"
    path.write_text(body, encoding="utf-8")
    return str(path)


class TestYamlConfig:
    """Config file parsing."""

    def test_missing_file(self, tmp_path):
        assert _load_yaml_config(str(tmp_path / "absent.yaml")) == {}

    def test_malformed_file_is_ignored(self, tmp_path, caplog):
        path = write_config(tmp_path, "hvm_home: [unclosed\n")
        with caplog.at_level(logging.WARNING):
            assert _load_yaml_config(path) == {}
        assert "Ignoring unreadable config file" in caplog.text

    def test_non_mapping_is_ignored(self, tmp_path):
        assert _load_yaml_config(write_config(tmp_path, "- a\n- b\n")) == {}

    def test_apply_config(self, tmp_path):
        path = write_config(
            tmp_path,
            "releases_url: https://mirror.example.com\n"
            "request_timeout: 12\n"
            "download_timeout: nope\n"
            "unknown_key: 1\n",
        )
        apply_config(_load_yaml_config(path))
        assert Constants.RELEASES_URL == "https://mirror.example.com"
        assert Constants.REQUEST_TIMEOUT == 12.0
        assert Constants.DOWNLOAD_TIMEOUT == 300


class TestPrecedence:
    """CLI flags over environment over config file over defaults."""

    def test_defaults_derive_from_user_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        load_configuration(parse_args(["info"]))
        assert hvm_home() == str(tmp_path / ".hvm")
        assert bin_dir() == str(tmp_path / "bin")

    def test_default_config_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / ".hvm").mkdir()
        (tmp_path / ".hvm" / "hvm.yaml").write_text("bin_dir: /opt/hvm/bin\n", encoding="utf-8")
        load_configuration(parse_args(["info"]))
        assert bin_dir() == "/opt/hvm/bin"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, "hvm_home: /from/file\nbin_dir: /from/file/bin\n")
        monkeypatch.setenv("HVM_HOME", "/from/env")
        load_configuration(parse_args(["-c", path, "info"]))
        assert hvm_home() == "/from/env"
        assert bin_dir() == "/from/file/bin"

    def test_cli_beats_env(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, "log_level: warning\n")
        monkeypatch.setenv("HVM_HOME", "/from/env")
        monkeypatch.setenv("HVM_BIN_DIR", "/from/env/bin")
        load_configuration(parse_args(["-c", path, "--home", "/from/cli", "info"]))
        assert hvm_home() == "/from/cli"
        assert bin_dir() == "/from/env/bin"
        assert Constants.LOG_LEVEL == "WARNING"

    def test_log_level_flag(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        home = tmp_path / "home"
        setup_runtime(parse_args(["--loglevel", "debug", "--home", str(home), "info"]))
        assert logging.getLogger().level == logging.DEBUG
        assert (home / "hvm.log").is_file()

    def test_log_level_is_not_exported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        setup_runtime(parse_args(["--loglevel", "warning", "--home", str(tmp_path / "home"), "info"]))
        assert logging.getLogger().level == logging.WARNING
        assert "HVM_LOG_LEVEL" not in os.environ
