"""
Tests for Settings.from_env: required secret, aliases and typed values.
"""

import pytest

from social_api.config import Settings

ENV_KEYS = (
    "SECRET_KEY",
    "JWT_SECRET_KEY",
    "DATABASE_URL",
    "HOST",
    "PORT",
    "TOKEN_EXPIRY_SECONDS",
    "BCRYPT_ROUNDS",
    "CORS_ORIGINS",
    "LOG_LEVEL",
)


@pytest.fixture
def env(monkeypatch):
    # setenv first so anything load_dotenv writes is removed again on teardown
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def no_env_file(tmp_path):
    return str(tmp_path / "missing.env")


def test_missing_secret_raises(env, no_env_file):
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        Settings.from_env(env_file=no_env_file)


def test_empty_secret_raises(env, no_env_file):
    env.setenv("SECRET_KEY", "")
    with pytest.raises(RuntimeError):
        Settings.from_env(env_file=no_env_file)


def test_jwt_secret_key_alias(env, no_env_file):
    env.setenv("JWT_SECRET_KEY", "from-alias")
    assert Settings.from_env(env_file=no_env_file).secret_key == "from-alias"


def test_secret_key_wins_over_alias(env, no_env_file):
    env.setenv("SECRET_KEY", "primary")
    env.setenv("JWT_SECRET_KEY", "alias")
    assert Settings.from_env(env_file=no_env_file).secret_key == "primary"


def test_defaults(env, no_env_file):
    env.setenv("SECRET_KEY", "s")
    settings = Settings.from_env(env_file=no_env_file)
    assert settings.port == 5000
    assert settings.token_expiry_seconds == 0
    assert settings.bcrypt_rounds == 10
    assert settings.database_url == "sqlite:///social.db"
    assert settings.cors_origins_list == ["*"]


def test_numbers_are_parsed(env, no_env_file):
    env.setenv("SECRET_KEY", "s")
    env.setenv("PORT", "8080")
    env.setenv("TOKEN_EXPIRY_SECONDS", "3600")
    env.setenv("BCRYPT_ROUNDS", "12")
    settings = Settings.from_env(env_file=no_env_file)
    assert settings.port == 8080
    assert settings.token_expiry_seconds == 3600
    assert settings.bcrypt_rounds == 12


def test_non_numeric_port_fails(env, no_env_file):
    env.setenv("SECRET_KEY", "s")
    env.setenv("PORT", "eighty")
    with pytest.raises(ValueError):
        Settings.from_env(env_file=no_env_file)


def test_cors_origins_list(env, no_env_file):
    env.setenv("SECRET_KEY", "s")
    env.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com,")
    assert Settings.from_env(env_file=no_env_file).cors_origins_list == [
        "https://a.example.com",
        "https://b.example.com",
    ]


def test_reads_env_file(env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("JWT_SECRET_KEY=file-secret\nPORT=7000\nLOG_LEVEL=DEBUG\n")
    settings = Settings.from_env(env_file=str(env_file))
    assert settings.secret_key == "file-secret"
    assert settings.port == 7000
    assert settings.log_level == "DEBUG"


def test_process_env_beats_env_file(env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SECRET_KEY=file-secret\n")
    env.setenv("SECRET_KEY", "process-secret")
    assert Settings.from_env(env_file=str(env_file)).secret_key == "process-secret"
