from __future__ import annotations

from chatbridge.config.schema import ENV_SCHEMA, TOP_LEVEL_KEYS, iter_env_variables


def test_top_level_keys() -> None:
    assert TOP_LEVEL_KEYS == (
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
    )
    assert ENV_SCHEMA.key == ""


def test_env_variable_names_are_unique() -> None:
    names = [v.name for v in iter_env_variables()]
    aliases = [a for v in iter_env_variables() for a in v.aliases]

    assert len(names) == len(set(names))
    assert not set(names) & set(aliases)


def test_env_variable_names_follow_key_paths() -> None:
    by_path = {v.key_path: v for v in iter_env_variables()}

    assert by_path["SERVER.PORT"].name == "SERVER_PORT"
    assert by_path["DATABASE.CONNECTION.URI"].name == "DATABASE_CONNECTION_URI"
    assert by_path["WEBHOOK.EVENTS.MESSAGES_UPSERT"].name == "WEBHOOK_EVENTS_MESSAGES_UPSERT"
    assert by_path["AUTHENTICATION.API_KEY.KEY"].name == "AUTHENTICATION_API_KEY"
    assert by_path["DEL_INSTANCE"].kind == "del_instance"
    assert by_path["CORS.ORIGIN"].required is True
    assert by_path["SSL_CONF.PRIVKEY"].required is False


def test_webhook_events() -> None:
    events = [v for v in iter_env_variables() if v.key_path.startswith("WEBHOOK.EVENTS.")]

    assert len(events) == 18
    assert all(v.kind == "bool" for v in events)
