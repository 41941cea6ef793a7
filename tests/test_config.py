"""Tests for configuration loading and logging setup."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

import toolbelt
from toolbelt import (
    CustomFormatter,
    get_config,
    get_config_value,
    load_config,
    setup_logging,
)

CONFIG = """\
[codesign]
identity = "John Doe"
entitlements = "entitlements.plist"

[manifest]
path = "Cargo.toml"
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_explicit_path(self, temp_dir):
        path = temp_dir / "custom.toml"
        path.write_text(CONFIG)

        config = load_config(path)

        assert get_config_value(config, "codesign", "identity") == "John Doe"

    def test_dotfile_in_cwd(self, temp_dir, monkeypatch):
        (temp_dir / ".toolbelt.toml").write_text(CONFIG)
        monkeypatch.chdir(temp_dir)

        config = load_config()

        assert get_config_value(config, "manifest", "path") == "Cargo.toml"

    def test_dotfile_preferred(self, temp_dir, monkeypatch):
        (temp_dir / ".toolbelt.toml").write_text('[codesign]\nidentity = "dot"\n')
        (temp_dir / "toolbelt.toml").write_text('[codesign]\nidentity = "plain"\n')
        monkeypatch.chdir(temp_dir)

        config = load_config()

        assert get_config_value(config, "codesign", "identity") == "dot"

    def test_no_config(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)

        assert load_config() == {}

    def test_invalid_config_skipped(self, temp_dir, monkeypatch, caplog):
        (temp_dir / ".toolbelt.toml").write_text("[codesign\n")
        (temp_dir / "toolbelt.toml").write_text('[codesign]\nidentity = "ok"\n')
        monkeypatch.chdir(temp_dir)

        with caplog.at_level(logging.WARNING, logger="toolbelt"):
            config = load_config()

        assert get_config_value(config, "codesign", "identity") == "ok"
        assert "skipping config file" in caplog.text

    def test_get_config_is_cached(self, temp_dir, monkeypatch):
        (temp_dir / ".toolbelt.toml").write_text(CONFIG)
        monkeypatch.chdir(temp_dir)
        monkeypatch.setattr(toolbelt, "_config", None)

        first = get_config()
        (temp_dir / ".toolbelt.toml").unlink()

        assert get_config() is first


class TestGetConfigValue:
    """Tests for get_config_value()."""

    def test_missing_section(self):
        assert get_config_value({}, "codesign", "identity", "-") == "-"

    def test_missing_key(self):
        config = {"codesign": {}}
        assert get_config_value(config, "codesign", "identity") is None

    def test_section_not_a_table(self):
        config = {"codesign": "oops"}
        assert get_config_value(config, "codesign", "identity", "-") == "-"

    def test_non_string_value(self):
        config = {"codesign": {"identity": 42}}
        assert get_config_value(config, "codesign", "identity", "-") == "-"


class TestLogging:
    """Tests for CustomFormatter and setup_logging()."""

    def make_record(self, level=logging.INFO):
        return logging.LogRecord(
            name="toolbelt",
            level=level,
            pathname=__file__,
            lineno=1,
            msg="copied %d files",
            args=(3,),
            exc_info=None,
            func="copy_dir_with_pattern",
        )

    def test_plain_format(self):
        formatter = CustomFormatter(use_color=False)

        output = formatter.format(self.make_record())

        assert "INFO" in output
        assert "toolbelt.copy_dir_with_pattern" in output
        assert "copied 3 files" in output
        assert "\x1b[" not in output

    def test_color_format(self):
        formatter = CustomFormatter(use_color=True)

        output = formatter.format(self.make_record(logging.ERROR))

        assert CustomFormatter.color.red in output
        assert "copied 3 files" in output

    def test_setup_logging_installs_formatter(self):
        with patch("logging.basicConfig") as mock_basic_config:
            setup_logging(debug=False, use_color=False)

        kwargs = mock_basic_config.call_args.kwargs
        assert kwargs["level"] == logging.INFO
        formatter = kwargs["handlers"][0].formatter
        assert isinstance(formatter, CustomFormatter)
        assert formatter.use_color is False

    def test_setup_logging_debug(self):
        with patch("logging.basicConfig") as mock_basic_config:
            setup_logging()

        assert mock_basic_config.call_args.kwargs["level"] == logging.DEBUG


class TestLoadDotenv:
    """Tests for _load_dotenv()."""

    def test_loads_env_file_from_working_directory(
        self, temp_dir, monkeypatch
    ):
        pytest.importorskip("dotenv")
        (temp_dir / ".env").write_text("TOOLBELT_TEST_SDK=/opt/sdk\n")
        monkeypatch.chdir(temp_dir)
        # registered so monkeypatch removes the loaded value afterwards
        monkeypatch.setenv("TOOLBELT_TEST_SDK", "")
        monkeypatch.delenv("TOOLBELT_TEST_SDK")

        toolbelt._load_dotenv()

        assert os.environ["TOOLBELT_TEST_SDK"] == "/opt/sdk"
