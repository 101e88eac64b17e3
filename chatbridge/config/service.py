from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping, overload

from chatbridge.config.loader import default_env_file, load_env, read_process_environ
from chatbridge.config.model import (
    Auth,
    ConfigSessionPhone,
    Cors,
    Database,
    DelInstance,
    Env,
    HttpServer,
    Log,
    QrCode,
    Redis,
    SourceMode,
    SslConf,
    StoreConf,
    Webhook,
)
from chatbridge.config.schema import ENV_SCHEMA, TOP_LEVEL_KEYS, dump

Key = Literal[
    "SERVER",
    "CORS",
    "SSL_CONF",
    "STORE",
    "DATABASE",
    "REDIS",
    "LOG",
    "DEL_INSTANCE",
    "WEBHOOK",
    "CONFIG_SESSION_PHONE",
    "QRCODE",
    "AUTHENTICATION",
    "PRODUCTION",
]


class ConfigService:
    """Holds the configuration record for the lifetime of the process.

    Construct exactly one at bootstrap and pass it to whatever needs it.
    Construction performs the whole load; a :class:`ConfigError` raised here
    means the service must not start.

    Args:
        environ: Variables to read. Defaults to the process environment, with
            ``<cwd>/.env`` merged in when ``load_dotenv_file`` is true.
        cwd: Base directory for ``src/env.yml`` and ``.env``. Defaults to the
            current working directory.
        env_file: Explicit YAML path, overriding ``<cwd>/src/env.yml``.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        *,
        cwd: Path | None = None,
        env_file: Path | None = None,
        load_dotenv_file: bool = True,
    ):
        base = cwd or Path.cwd()
        if environ is None:
            environ = read_process_environ(base, load_dotenv_file=load_dotenv_file)

        self._mode, self._env = load_env(environ, env_file=env_file or default_env_file(base))

    @property
    def env(self) -> Env:
        return self._env

    @property
    def mode(self) -> SourceMode:
        return self._mode

    @overload
    def get(self, key: Literal["SERVER"]) -> HttpServer: ...
    @overload
    def get(self, key: Literal["CORS"]) -> Cors: ...
    @overload
    def get(self, key: Literal["SSL_CONF"]) -> SslConf: ...
    @overload
    def get(self, key: Literal["STORE"]) -> StoreConf: ...
    @overload
    def get(self, key: Literal["DATABASE"]) -> Database: ...
    @overload
    def get(self, key: Literal["REDIS"]) -> Redis: ...
    @overload
    def get(self, key: Literal["LOG"]) -> Log: ...
    @overload
    def get(self, key: Literal["DEL_INSTANCE"]) -> DelInstance: ...
    @overload
    def get(self, key: Literal["WEBHOOK"]) -> Webhook: ...
    @overload
    def get(self, key: Literal["CONFIG_SESSION_PHONE"]) -> ConfigSessionPhone: ...
    @overload
    def get(self, key: Literal["QRCODE"]) -> QrCode: ...
    @overload
    def get(self, key: Literal["AUTHENTICATION"]) -> Auth: ...
    @overload
    def get(self, key: Literal["PRODUCTION"]) -> bool: ...

    def get(self, key: Key) -> Any:
        """Return one top-level section. Unknown keys raise ``KeyError``."""

        if key not in _KEYS:
            raise KeyError(key)
        return getattr(self._env, key.lower())

    def to_dict(self) -> dict[str, Any]:
        """The record in the upper-case shape of ``env.yml``, plus ``PRODUCTION``."""

        out = dump(ENV_SCHEMA, self._env)
        out["PRODUCTION"] = self._env.production
        return out


_KEYS: frozenset[str] = frozenset(TOP_LEVEL_KEYS)
