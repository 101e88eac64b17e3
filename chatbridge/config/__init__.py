"""Configuration loading and schema.

- `src/env.yml` by default, one environment variable per leaf when
  `DOCKER_ENV=true`
- a single schema drives both sources
"""

from __future__ import annotations

from chatbridge.config.errors import ConfigError, MalformedValueError, SourceUnavailableError
from chatbridge.config.model import (
    DelInstance,
    DelInstanceFlag,
    DelInstanceTimeout,
    Env,
    SourceMode,
)
from chatbridge.config.service import ConfigService

__all__ = [
    "ConfigError",
    "ConfigService",
    "DelInstance",
    "DelInstanceFlag",
    "DelInstanceTimeout",
    "Env",
    "MalformedValueError",
    "SourceMode",
    "SourceUnavailableError",
]
