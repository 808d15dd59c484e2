"""Shared fixtures."""

import logging

import pytest

from fkfixer.log import ROOT_LOGGER


@pytest.fixture(autouse=True)
def restore_fkfixer_logger():
    """Undo ``configure_logging`` calls made by a test, e.g. through the CLI."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def no_env_db_url(monkeypatch):
    """Hide database URLs from the environment and any ``.env`` file."""
    monkeypatch.delenv("FKFIXER_DB_URL", raising=False)
    monkeypatch.delenv("MYSQL_URL", raising=False)
    monkeypatch.setattr("fkfixer.config.load_dotenv", lambda *args, **kwargs: False)
