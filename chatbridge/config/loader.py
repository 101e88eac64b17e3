from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml
from dotenv import load_dotenv

from chatbridge.config.errors import MalformedValueError, SourceUnavailableError
from chatbridge.config.model import Env, HttpServer, SourceMode
from chatbridge.config.schema import ENV_SCHEMA, build_from_environ, build_from_mapping
from chatbridge.observability.logging import get_logger

SELECTOR_VAR = "DOCKER_ENV"
PRODUCTION_VAR = "NODE_ENV"
PRODUCTION_MARKER = "PROD"

# Listen address imposed by the platform in managed mode.
MANAGED_SERVER = HttpServer(type="http", port=8083)

log = get_logger("chatbridge.config")


def default_env_file(cwd: Path) -> Path:
    return cwd / "src" / "env.yml"


def select_mode(environ: Mapping[str, str]) -> SourceMode:
    return SourceMode.MANAGED if environ.get(SELECTOR_VAR) == "true" else SourceMode.DEFAULT


def read_process_environ(cwd: Path, *, load_dotenv_file: bool = True) -> MutableMapping[str, str]:
    """Return ``os.environ``, after merging ``<cwd>/.env`` into it.

    Variables already set in the process are never overridden.
    """

    if load_dotenv_file:
        load_dotenv(cwd / ".env", override=False)
    return os.environ


def _load_yaml(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SourceUnavailableError(f"cannot read config file: {e}", path=str(path)) from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedValueError(f"YAML parse error: {e}", path=str(path)) from e


def load_from_file(path: Path) -> Env:
    """Load the record from a YAML document whose shape matches :class:`Env`."""

    raw = _load_yaml(path)
    if raw is None:
        raise MalformedValueError("config file is empty", path=str(path))
    if not isinstance(raw, Mapping):
        raise MalformedValueError("top-level YAML must be a mapping", path=str(path))

    return build_from_mapping(ENV_SCHEMA, raw)


def load_from_environ(environ: Mapping[str, str]) -> Env:
    """Load the record from one environment variable per leaf."""

    return build_from_environ(ENV_SCHEMA, environ)


def load_env(
    environ: Mapping[str, str],
    *,
    env_file: Path,
) -> tuple[SourceMode, Env]:
    """Select the source, load it and apply the post-load overrides.

    Raises:
        ConfigError: If the selected source is missing or unusable.
    """

    mode = select_mode(environ)
    log.info("config_source_selected", mode=mode.value, env_file=str(env_file))

    if mode is SourceMode.MANAGED:
        env = load_from_environ(environ)
    else:
        env = load_from_file(env_file)

    env = dataclasses.replace(env, production=environ.get(PRODUCTION_VAR) == PRODUCTION_MARKER)
    if mode is SourceMode.MANAGED:
        env = dataclasses.replace(env, server=MANAGED_SERVER)

    log.info(
        "config_loaded",
        mode=mode.value,
        production=env.production,
        server_type=env.server.type,
        server_port=env.server.port,
    )
    return mode, env
