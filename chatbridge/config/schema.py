"""Canonical schema of the configuration record.

Each leaf is declared once with its coercion kind, environment variable name
and default. Both load paths (YAML mapping and process environment) and the
mapping dump are derived from :data:`ENV_SCHEMA`, so adding a field here is
enough for every source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Literal, Mapping, Union, get_args

from chatbridge.config.coerce import parse_bool, parse_del_instance, parse_int, parse_list
from chatbridge.config.errors import MalformedValueError, SourceUnavailableError
from chatbridge.config.model import (
    ApiKey,
    Auth,
    AuthType,
    ConfigSessionPhone,
    Cors,
    Database,
    DBConnection,
    DelInstanceFlag,
    DelInstanceTimeout,
    Env,
    EventsWebhook,
    GlobalWebhook,
    HttpMethod,
    HttpServer,
    Jwt,
    Log,
    LogLevel,
    QrCode,
    Redis,
    SaveData,
    ServerType,
    SslConf,
    StoreConf,
    Webhook,
)
from chatbridge.observability.logging import get_logger

LeafKind = Literal["str", "bool", "int", "list", "del_instance"]

log = get_logger("chatbridge.config")


@dataclass(frozen=True, slots=True)
class Leaf:
    """A terminal value.

    ``required`` and ``default`` only apply to managed mode; the YAML file is
    taken as written.
    """

    key: str
    kind: LeafKind = "str"
    required: bool = False
    default: Any = None
    env_name: str | None = None
    aliases: tuple[str, ...] = ()
    choices: frozenset[str] | None = None

    @property
    def attr(self) -> str:
        return self.key.lower()


@dataclass(frozen=True, slots=True)
class Section:
    key: str
    model: type
    fields: tuple[Union[Leaf, "Section"], ...]
    optional: bool = False
    attr_name: str | None = None

    @property
    def attr(self) -> str:
        return self.attr_name or self.key.lower()


@dataclass(frozen=True, slots=True)
class EnvVariable:
    name: str
    key_path: str
    kind: LeafKind
    required: bool
    aliases: tuple[str, ...]


def _bools(*keys: str) -> tuple[Leaf, ...]:
    return tuple(Leaf(k, "bool") for k in keys)


ENV_SCHEMA = Section(
    "",
    Env,
    (
        Section(
            "SERVER",
            HttpServer,
            (
                Leaf("TYPE", choices=frozenset(get_args(ServerType))),
                Leaf("PORT", "int"),
            ),
        ),
        Section(
            "CORS",
            Cors,
            (
                Leaf("ORIGIN", "list"),
                Leaf("METHODS", "list", choices=frozenset(get_args(HttpMethod))),
                Leaf("CREDENTIALS", "bool"),
            ),
        ),
        Section("SSL_CONF", SslConf, (Leaf("PRIVKEY"), Leaf("FULLCHAIN"))),
        Section(
            "STORE",
            StoreConf,
            (
                Leaf("CLEANING_INTERVAL", "int", aliases=("STORE_CLEANING_TERMINAL",)),
                Leaf("MESSAGES", "bool", aliases=("STORE_MESSAGE",)),
                *_bools("CONTACTS", "CHATS"),
            ),
        ),
        Section(
            "DATABASE",
            Database,
            (
                Section(
                    "CONNECTION",
                    DBConnection,
                    (Leaf("URI", required=True), Leaf("DB_PREFIX_NAME", required=True)),
                ),
                Leaf("ENABLED", "bool"),
                Section(
                    "SAVE_DATA",
                    SaveData,
                    (
                        *_bools("INSTANCE", "OLD_MESSAGE", "NEW_MESSAGE"),
                        Leaf("MESSAGE_UPDATE", "bool", aliases=("DATABASE_SAVE_MESSAGE_UPDATE",)),
                        *_bools("CONTACTS", "CHATS"),
                    ),
                ),
            ),
        ),
        Section(
            "REDIS",
            Redis,
            (
                Leaf("ENABLED", "bool"),
                Leaf("URI", required=True),
                Leaf("PREFIX_KEY", required=True),
            ),
        ),
        Section(
            "LOG",
            Log,
            (
                Leaf("LEVEL", "list", choices=frozenset(get_args(LogLevel))),
                Leaf("COLOR", "bool"),
            ),
        ),
        Leaf("DEL_INSTANCE", "del_instance"),
        Section(
            "WEBHOOK",
            Webhook,
            (
                Section(
                    "GLOBAL",
                    GlobalWebhook,
                    (Leaf("URL"), Leaf("ENABLED", "bool")),
                    optional=True,
                    attr_name="global_webhook",
                ),
                Section(
                    "EVENTS",
                    EventsWebhook,
                    (
                        *_bools(
                            "QRCODE_UPDATED",
                            "MESSAGES_SET",
                            "MESSAGES_UPSERT",
                            "MESSAGES_UPDATE",
                            "SEND_MESSAGE",
                            "CONTACTS_SET",
                            "CONTACTS_UPDATE",
                            "CONTACTS_UPSERT",
                            "PRESENCE_UPDATE",
                            "CHATS_SET",
                            "CHATS_UPDATE",
                            "CHATS_DELETE",
                            "CHATS_UPSERT",
                            "CONNECTION_UPDATE",
                            "GROUPS_UPSERT",
                        ),
                        Leaf("GROUP_UPDATE", "bool", aliases=("WEBHOOK_EVENTS_GROUPS_UPDATE",)),
                        *_bools("GROUP_PARTICIPANTS_UPDATE", "NEW_JWT_TOKEN"),
                    ),
                ),
            ),
        ),
        Section("CONFIG_SESSION_PHONE", ConfigSessionPhone, (Leaf("CLIENT"), Leaf("NAME"))),
        Section("QRCODE", QrCode, (Leaf("LIMIT", "int"),)),
        Section(
            "AUTHENTICATION",
            Auth,
            (
                Leaf("TYPE", required=True, choices=frozenset(get_args(AuthType))),
                Section(
                    "API_KEY",
                    ApiKey,
                    (Leaf("KEY", required=True, env_name="AUTHENTICATION_API_KEY"),),
                ),
                Section(
                    "JWT",
                    Jwt,
                    (Leaf("EXPIRIN_IN", "int", default=3600), Leaf("SECRET", required=True)),
                ),
            ),
        ),
    ),
)

TOP_LEVEL_KEYS: tuple[str, ...] = (*(node.key for node in ENV_SCHEMA.fields), "PRODUCTION")


def _join(prefix: str, key: str, sep: str) -> str:
    return f"{prefix}{sep}{key}" if prefix else key


def _check_choices(leaf: Leaf, value: Any, *, key_path: str) -> None:
    if leaf.choices is None or value is None:
        return
    items = value if isinstance(value, tuple) else (value,)
    unknown = [v for v in items if v not in leaf.choices]
    if unknown:
        # Passed through unchecked; consumers see the literal as written.
        log.warning("config_unrecognized_literal", key_path=key_path, values=unknown)


def _from_file_value(leaf: Leaf, value: Any, *, key_path: str) -> Any:
    if leaf.kind == "del_instance":
        if isinstance(value, bool):
            return DelInstanceFlag(enabled=value)
        if isinstance(value, int):
            return DelInstanceTimeout(minutes=value)
        if value is None or isinstance(value, str):
            return parse_del_instance(value)
        raise MalformedValueError("must be a boolean or a whole number of minutes", path=key_path)

    if leaf.kind == "list" and isinstance(value, str):
        # `LEVEL: ERROR` means a one-item list.
        value = (value,)
    elif isinstance(value, list):
        value = tuple(value)

    if leaf.choices is not None and value is not None:
        items = value if isinstance(value, tuple) else (value,)
        if not all(isinstance(v, str) for v in items):
            raise MalformedValueError("must be a string or a list of strings", path=key_path)
    _check_choices(leaf, value, key_path=key_path)
    return value


def build_from_mapping(section: Section, data: Mapping[str, Any], *, key_path: str = "") -> Any:
    """Build ``section.model`` from a parsed YAML mapping, values verbatim."""

    kwargs: dict[str, Any] = {}
    for node in section.fields:
        child_path = _join(key_path, node.key, ".")
        value = data.get(node.key)
        if isinstance(node, Section):
            if value is None:
                if node.optional:
                    kwargs[node.attr] = None
                    continue
                value = {}
            if not isinstance(value, Mapping):
                raise MalformedValueError("section must be a mapping", path=child_path)
            kwargs[node.attr] = build_from_mapping(node, value, key_path=child_path)
        else:
            kwargs[node.attr] = _from_file_value(node, value, key_path=child_path)
    return section.model(**kwargs)


def _lookup(environ: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = environ.get(name)
        if value is not None:
            return value
    return None


def _from_environ(leaf: Leaf, environ: Mapping[str, str], *, name: str, key_path: str) -> Any:
    raw = _lookup(environ, (name, *leaf.aliases))

    if leaf.kind == "bool":
        return parse_bool(raw)
    if leaf.kind == "int":
        parsed = parse_int(raw)
        return leaf.default if parsed is None else parsed
    if leaf.kind == "del_instance":
        return parse_del_instance(raw)
    if leaf.kind == "list":
        value: Any = parse_list(raw, path=name)
    else:
        if raw is None and leaf.required:
            raise SourceUnavailableError("required environment variable is not set", path=name)
        value = raw

    _check_choices(leaf, value, key_path=key_path)
    return value


def build_from_environ(
    section: Section,
    environ: Mapping[str, str],
    *,
    key_path: str = "",
    prefix: str = "",
) -> Any:
    """Build ``section.model`` from one environment variable per leaf."""

    kwargs: dict[str, Any] = {}
    for node in section.fields:
        child_path = _join(key_path, node.key, ".")
        child_prefix = _join(prefix, node.key, "_")
        if isinstance(node, Section):
            kwargs[node.attr] = build_from_environ(
                node, environ, key_path=child_path, prefix=child_prefix
            )
        else:
            kwargs[node.attr] = _from_environ(
                node, environ, name=node.env_name or child_prefix, key_path=child_path
            )
    return section.model(**kwargs)


def iter_env_variables(section: Section = ENV_SCHEMA, *, prefix: str = "", key_path: str = "") -> Iterator[EnvVariable]:
    """Yield every managed-mode environment variable in declaration order."""

    for node in section.fields:
        child_path = _join(key_path, node.key, ".")
        child_prefix = _join(prefix, node.key, "_")
        if isinstance(node, Section):
            yield from iter_env_variables(node, prefix=child_prefix, key_path=child_path)
        else:
            yield EnvVariable(
                name=node.env_name or child_prefix,
                key_path=child_path,
                kind=node.kind,
                required=node.required or node.kind == "list",
                aliases=node.aliases,
            )


def _dump_leaf(value: Any) -> Any:
    if isinstance(value, DelInstanceFlag):
        return value.enabled
    if isinstance(value, DelInstanceTimeout):
        return value.minutes
    if isinstance(value, tuple):
        return list(value)
    return value


def dump(section: Section, obj: Any) -> dict[str, Any]:
    """Convert a record back into the upper-case mapping shape of ``env.yml``."""

    out: dict[str, Any] = {}
    for node in section.fields:
        value = getattr(obj, node.attr)
        if isinstance(node, Section):
            if value is None:
                if not node.optional:
                    out[node.key] = None
                continue
            out[node.key] = dump(node, value)
        else:
            out[node.key] = _dump_leaf(value)
    return out
