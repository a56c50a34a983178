"""Tests for harness configuration loading."""

import os

import pytest

from pageperf.config.harness_config import HarnessConfig, load_config
from pageperf.exceptions import ConfigurationError
from pageperf.models.perf_models import BrowserType


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove PAGEPERF_* variables so defaults are predictable."""
    for key in list(os.environ):
        if key.startswith("PAGEPERF_"):
            monkeypatch.delenv(key, raising=False)


class TestHarnessConfig:
    """Tests for HarnessConfig defaults and helpers."""

    def test_defaults(self):
        """Test default values."""
        config = HarnessConfig()
        assert config.base_url == "https://demoqa.com"
        assert config.browser == BrowserType.CHROMIUM
        assert config.headless is True
        assert config.test_time_ms == 60000
        assert config.wait_until == "load"
        assert config.strict_order is False
        assert config.viewport.width == 1350

    def test_env_defaults(self, monkeypatch):
        """Test that field defaults read the environment."""
        monkeypatch.setenv("PAGEPERF_HEADLESS", "false")
        monkeypatch.setenv("PAGEPERF_TEST_TIME_MS", "1500")
        config = HarnessConfig()
        assert config.headless is False
        assert config.test_time_ms == 1500

    def test_resolve_url(self):
        """Test resolving relative and absolute URLs."""
        config = HarnessConfig(base_url="https://example.test/")
        assert config.resolve_url("/text-box") == "https://example.test/text-box"
        assert config.resolve_url("text-box") == "https://example.test/text-box"
        assert config.resolve_url("https://other.test/x") == "https://other.test/x"


class TestLoadConfig:
    """Tests for load_config merging."""

    def test_yaml_section(self, tmp_path):
        """Test loading the pageperf section of a YAML file."""
        path = tmp_path / "config.yaml"
        path.write_text("pageperf:\n  base_url: https://yaml.test\n  test_time_ms: 5000\n")

        config = load_config(str(path))

        assert config.base_url == "https://yaml.test"
        assert config.test_time_ms == 5000

    def test_yaml_whole_file(self, tmp_path):
        """Test loading a file without a pageperf section."""
        path = tmp_path / "config.yaml"
        path.write_text("headless: false\n")

        assert load_config(str(path)).headless is False

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that PAGEPERF_* variables override the file."""
        path = tmp_path / "config.yaml"
        path.write_text("test_time_ms: 5000\n")
        monkeypatch.setenv("PAGEPERF_TEST_TIME_MS", "7000")

        assert load_config(str(path)).test_time_ms == 7000

    def test_keyword_overrides(self):
        """Test that explicit overrides win and None is ignored."""
        config = load_config(headless=False, base_url=None)
        assert config.headless is False
        assert config.base_url == "https://demoqa.com"

    def test_missing_file(self, tmp_path):
        """Test that a missing file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        """Test that broken YAML is a configuration error."""
        path = tmp_path / "config.yaml"
        path.write_text("pageperf: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(str(path))

    def test_invalid_value(self):
        """Test that an invalid value is a configuration error."""
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(test_time_ms=-1)

    def test_invalid_browser_env(self, monkeypatch):
        """Test that an unknown browser is a configuration error."""
        monkeypatch.setenv("PAGEPERF_BROWSER", "netscape")
        with pytest.raises(ConfigurationError):
            load_config()
