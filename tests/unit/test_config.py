"""Unit tests for config.py"""

import pytest

from devsync.config import load_config


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Run from an empty directory with no devsync or dev.to variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ("DEVTO_APIKEY", "DEVSYNC_API_KEY", "DEVSYNC_PER_PAGE", "DEVSYNC_ROOT_DIR",
                 "DEVSYNC_RECORD_URL", "DEVSYNC_RETRY_DELAY"):
        monkeypatch.delenv(name, raising=False)


def test_load_config_defaults():
    """Settings defaults apply when no devsync.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.api_key == ""
    assert settings.api_url == "https://dev.to"
    assert settings.per_page == 1000
    assert settings.retry_delay == 1.0
    assert settings.id_field == "devtoId"


def test_api_key_from_devto_env(monkeypatch):
    """DEVTO_APIKEY is the fallback for the API key."""
    monkeypatch.setenv("DEVTO_APIKEY", "from-env")
    assert load_config().api_key == "from-env"


def test_devsync_env_beats_devto_env(monkeypatch):
    monkeypatch.setenv("DEVTO_APIKEY", "generic")
    monkeypatch.setenv("DEVSYNC_API_KEY", "specific")
    assert load_config().api_key == "specific"


def test_cli_override_beats_env(monkeypatch):
    """A non-None CLI override beats the environment."""
    monkeypatch.setenv("DEVTO_APIKEY", "from-env")
    assert load_config(overrides={"api_key": "from-flag", "root_dir": None}).api_key == "from-flag"


def test_config_file(tmp_path):
    (tmp_path / "devsync.yaml").write_text("root_dir: blog\nper_page: 100\nrecord_url: true\n")
    settings = load_config()
    assert settings.root_dir == "blog"
    assert settings.per_page == 100
    assert settings.record_url is True


def test_env_overrides_config_file(tmp_path, monkeypatch):
    (tmp_path / "devsync.yaml").write_text("per_page: 100\n")
    monkeypatch.setenv("DEVSYNC_PER_PAGE", "10")
    assert load_config().per_page == 10


def test_env_coerces_types(monkeypatch):
    monkeypatch.setenv("DEVSYNC_RECORD_URL", "true")
    monkeypatch.setenv("DEVSYNC_RETRY_DELAY", "0.5")
    settings = load_config()
    assert settings.record_url is True
    assert settings.retry_delay == 0.5


def test_invalid_yaml(tmp_path):
    (tmp_path / "devsync.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid devsync.yaml"):
        load_config()


def test_per_page_out_of_range():
    """Values outside the platform's page size limit are rejected."""
    with pytest.raises(ValueError):
        load_config(overrides={"per_page": 5000})


def test_log_format_validated():
    with pytest.raises(ValueError):
        load_config(overrides={"log_format": "xml"})
