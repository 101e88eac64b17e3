from __future__ import annotations

import logging
from pathlib import Path

import pytest

from chatbridge.observability.logging import ColorFormatter, JsonFormatter


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    level = root.level
    yield
    # Drop handlers installed by configure_logging; they hold captured streams.
    for h in list(root.handlers):
        if isinstance(h.formatter, (JsonFormatter, ColorFormatter)):
            root.removeHandler(h)
    root.setLevel(level)


@pytest.fixture
def managed_environ() -> dict[str, str]:
    """Smallest managed-mode environment that loads without errors."""

    return {
        "DOCKER_ENV": "true",
        "CORS_ORIGIN": "*",
        "CORS_METHODS": "POST,GET,PUT,DELETE",
        "LOG_LEVEL": "ERROR,WARN",
        "DATABASE_CONNECTION_URI": "mongodb://localhost:27017",
        "DATABASE_CONNECTION_DB_PREFIX_NAME": "chatbridge",
        "REDIS_URI": "redis://localhost:6379",
        "REDIS_PREFIX_KEY": "chatbridge",
        "AUTHENTICATION_TYPE": "jwt",
        "AUTHENTICATION_API_KEY": "k_test",
        "AUTHENTICATION_JWT_SECRET": "s_test",
    }


@pytest.fixture
def write_env_yml(tmp_path: Path):
    """Write `src/env.yml` under tmp_path and return tmp_path as the cwd."""

    def _write(text: str) -> Path:
        p = tmp_path / "src" / "env.yml"
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text.lstrip(), encoding="utf-8")
        return tmp_path

    return _write
