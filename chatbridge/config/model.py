from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union

ServerType = Literal["http", "https"]
HttpMethod = Literal["POST", "GET", "PUT", "DELETE"]
LogLevel = Literal["ERROR", "WARN", "DEBUG", "INFO", "LOG", "VERBOSE", "DARK"]
AuthType = Literal["jwt", "apikey"]


class SourceMode(str, Enum):
    """Where the record was read from."""

    DEFAULT = "default"  # src/env.yml
    MANAGED = "managed"  # one environment variable per leaf


@dataclass(frozen=True, slots=True)
class HttpServer:
    type: ServerType | None
    port: int | None


@dataclass(frozen=True, slots=True)
class Cors:
    origin: tuple[str, ...] | None
    methods: tuple[HttpMethod, ...] | None
    credentials: bool | None


@dataclass(frozen=True, slots=True)
class SslConf:
    privkey: str | None
    fullchain: str | None


@dataclass(frozen=True, slots=True)
class StoreConf:
    cleaning_interval: int | None
    messages: bool | None
    contacts: bool | None
    chats: bool | None


@dataclass(frozen=True, slots=True)
class DBConnection:
    uri: str | None
    db_prefix_name: str | None


@dataclass(frozen=True, slots=True)
class SaveData:
    instance: bool | None
    old_message: bool | None
    new_message: bool | None
    message_update: bool | None
    contacts: bool | None
    chats: bool | None


@dataclass(frozen=True, slots=True)
class Database:
    connection: DBConnection
    enabled: bool | None
    save_data: SaveData


@dataclass(frozen=True, slots=True)
class Redis:
    enabled: bool | None
    uri: str | None
    prefix_key: str | None


@dataclass(frozen=True, slots=True)
class Log:
    level: tuple[LogLevel, ...] | None
    color: bool | None


@dataclass(frozen=True, slots=True)
class DelInstanceFlag:
    """Delete the instance on logout (or never)."""

    enabled: bool


@dataclass(frozen=True, slots=True)
class DelInstanceTimeout:
    """Delete the instance after ``minutes``; ``None`` when the raw value was not numeric."""

    minutes: int | None


DelInstance = Union[DelInstanceFlag, DelInstanceTimeout]


@dataclass(frozen=True, slots=True)
class GlobalWebhook:
    url: str | None
    enabled: bool | None


@dataclass(frozen=True, slots=True)
class EventsWebhook:
    qrcode_updated: bool | None
    messages_set: bool | None
    messages_upsert: bool | None
    messages_update: bool | None
    send_message: bool | None
    contacts_set: bool | None
    contacts_update: bool | None
    contacts_upsert: bool | None
    presence_update: bool | None
    chats_set: bool | None
    chats_update: bool | None
    chats_delete: bool | None
    chats_upsert: bool | None
    connection_update: bool | None
    groups_upsert: bool | None
    group_update: bool | None
    group_participants_update: bool | None
    new_jwt_token: bool | None


@dataclass(frozen=True, slots=True)
class Webhook:
    global_webhook: GlobalWebhook | None
    events: EventsWebhook


@dataclass(frozen=True, slots=True)
class ConfigSessionPhone:
    client: str | None
    name: str | None


@dataclass(frozen=True, slots=True)
class QrCode:
    limit: int | None


@dataclass(frozen=True, slots=True)
class ApiKey:
    key: str | None


@dataclass(frozen=True, slots=True)
class Jwt:
    expirin_in: int | None
    secret: str | None


@dataclass(frozen=True, slots=True)
class Auth:
    type: AuthType | None
    api_key: ApiKey
    jwt: Jwt


@dataclass(frozen=True, slots=True)
class Env:
    """The resolved configuration record.

    Built once by :class:`chatbridge.config.service.ConfigService` and never
    mutated afterwards. ``production`` is derived from ``NODE_ENV`` and is not
    part of either source.
    """

    server: HttpServer
    cors: Cors
    ssl_conf: SslConf
    store: StoreConf
    database: Database
    redis: Redis
    log: Log
    del_instance: DelInstance
    webhook: Webhook
    config_session_phone: ConfigSessionPhone
    qrcode: QrCode
    authentication: Auth
    production: bool = False
