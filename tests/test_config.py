"""Tests for Settings.from_env."""

import os

import pytest

from companion import Settings

_VARS = (
    "GUARDIAN_STORE_PATH",
    "GUARDIAN_NOTIFY_TIMEOUT",
    "GUARDIAN_RANDOM_SEED",
    "GUARDIAN_LOG_LEVEL",
    "GUARDIAN_WHISPER_MODEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep any developer .env out of the tests.
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes os.environ directly.
    for name in _VARS:
        os.environ.pop(name, None)


def test_defaults(tmp_path):
    settings = Settings.from_env(dotenv_path=str(tmp_path / "missing.env"))

    assert settings.store_path == "guardian_store.json"
    assert settings.notify_timeout == 10.0
    assert settings.random_seed is None
    assert settings.log_level == "INFO"


def test_reads_dotenv_file(tmp_path):
    env = tmp_path / ".env"
    env.write_text(
        "GUARDIAN_STORE_PATH=/data/profile.json\n"
        "GUARDIAN_NOTIFY_TIMEOUT=2.5\n"
        "GUARDIAN_RANDOM_SEED=42\n"
        "GUARDIAN_LOG_LEVEL=debug\n"
    )

    settings = Settings.from_env(dotenv_path=str(env))

    assert settings.store_path == "/data/profile.json"
    assert settings.notify_timeout == 2.5
    assert settings.random_seed == 42
    assert settings.log_level == "DEBUG"


def test_invalid_values_listed(monkeypatch, tmp_path):
    monkeypatch.setenv("GUARDIAN_NOTIFY_TIMEOUT", "-1")
    monkeypatch.setenv("GUARDIAN_RANDOM_SEED", "abc")

    with pytest.raises(EnvironmentError) as excinfo:
        Settings.from_env(dotenv_path=str(tmp_path / "missing.env"))

    assert "GUARDIAN_NOTIFY_TIMEOUT" in str(excinfo.value)
    assert "GUARDIAN_RANDOM_SEED" in str(excinfo.value)
