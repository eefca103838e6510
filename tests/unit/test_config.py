"""
Test Configuration and Logging Setup
"""

import logging

import pytest

from modelbase.config import Settings
from modelbase.logging_config import setup_logging


def test_defaults(monkeypatch):
    monkeypatch.delenv("MODELBASE_AUTO_COMMIT", raising=False)
    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL.startswith("sqlite+aiosqlite://")
    assert settings.AUTO_COMMIT is True
    assert settings.QUERY_TIMEOUT_SECONDS is None
    assert "UNIQUE constraint failed" in settings.duplicate_key_signatures


def test_env_override(monkeypatch):
    monkeypatch.setenv("MODELBASE_AUTO_COMMIT", "false")
    monkeypatch.setenv("MODELBASE_QUERY_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("MODELBASE_DUPLICATE_KEY_SIGNATURES", " foo , ,bar")

    settings = Settings(_env_file=None)

    assert settings.AUTO_COMMIT is False
    assert settings.QUERY_TIMEOUT_SECONDS == 2.5
    assert settings.duplicate_key_signatures == ["foo", "bar"]


@pytest.fixture
def restore_loggers():
    names = ("root", "modelbase", "sqlalchemy.engine")
    loggers = [logging.getLogger(None if n == "root" else n) for n in names]
    saved = [(lg, lg.level, lg.propagate, list(lg.handlers)) for lg in loggers]
    yield
    for lg, level, propagate, handlers in saved:
        lg.setLevel(level)
        lg.propagate = propagate
        lg.handlers = handlers


def test_setup_logging_defaults(restore_loggers):
    setup_logging()

    repository_logger = logging.getLogger("modelbase.repositories.sqlalchemy.model_base")
    assert logging.getLogger("modelbase").handlers
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    # Upsert fallbacks (INFO) and wrapped failures (WARNING) are emitted
    assert repository_logger.isEnabledFor(logging.INFO)
    assert repository_logger.isEnabledFor(logging.WARNING)


def test_setup_logging_warning_level(restore_loggers):
    setup_logging("WARNING")

    repository_logger = logging.getLogger("modelbase.repositories.sqlalchemy.model_base")
    assert not repository_logger.isEnabledFor(logging.INFO)
    assert repository_logger.isEnabledFor(logging.WARNING)


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("MODELBASE_LOG_LEVEL", "WARNING")

    assert Settings(_env_file=None).LOG_LEVEL == "WARNING"
