from __future__ import annotations

import json
import logging
from pathlib import Path

from chatbridge.runtime.lifecycle import bootstrap, main


def test_print_config_redacts_secrets(managed_environ: dict[str, str], capsys) -> None:
    code = main(["print-config"], environ=managed_environ)

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["SERVER"] == {"TYPE": "http", "PORT": 8083}
    assert out["DATABASE"]["CONNECTION"]["URI"] == "<redacted>"
    assert out["AUTHENTICATION"]["API_KEY"]["KEY"] == "<redacted>"
    assert out["AUTHENTICATION"]["JWT"]["SECRET"] == "<redacted>"
    assert out["AUTHENTICATION"]["JWT"]["EXPIRIN_IN"] == 3600
    assert out["DEL_INSTANCE"] is None
    assert out["PRODUCTION"] is False


def test_check_is_the_default_command(managed_environ: dict[str, str], capsys) -> None:
    assert main([], environ=managed_environ) == 0
    assert capsys.readouterr().out == ""


def test_config_error_exits_with_status_1(managed_environ: dict[str, str], capsys) -> None:
    del managed_environ["REDIS_URI"]

    assert main(["check"], environ=managed_environ) == 1

    err = capsys.readouterr().err
    assert "config_invalid" in err
    assert "REDIS_URI" in err


def test_missing_file_exits_with_status_1(tmp_path: Path) -> None:
    assert main(["--cwd", str(tmp_path), "check"], environ={}) == 1


def test_list_env_needs_no_configuration(capsys) -> None:
    assert main(["list-env"], environ={}) == 0

    lines = capsys.readouterr().out.splitlines()
    names = [line.split("\t")[0] for line in lines]
    assert "SERVER_PORT" in names
    assert "AUTHENTICATION_API_KEY" in names
    assert "WEBHOOK_EVENTS_GROUP_PARTICIPANTS_UPDATE" in names
    assert any("legacy=STORE_CLEANING_TERMINAL" in line for line in lines)


def test_bootstrap_applies_log_section(managed_environ: dict[str, str]) -> None:
    managed_environ.update({"LOG_LEVEL": "ERROR", "LOG_COLOR": "true"})

    svc = bootstrap(managed_environ)

    assert svc.get("LOG").level == ("ERROR",)
    handler = logging.getLogger().handlers[0]
    assert not handler.filter(logging.LogRecord("x", logging.INFO, __file__, 1, "m", (), None))


def test_unknown_argument_returns_usage_error(capsys) -> None:
    assert main(["--nope"], environ={}) == 2


def test_malformed_enum_in_file_exits_with_status_1(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "env.yml").write_text("SERVER: {TYPE: {a: 1}}\n", encoding="utf-8")

    assert main(["--cwd", str(tmp_path), "check"], environ={}) == 1


def test_scalar_log_level_keeps_error_records(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "env.yml").write_text("LOG:\n  LEVEL: ERROR\n", encoding="utf-8")

    bootstrap({}, cwd=tmp_path)

    handler = logging.getLogger().handlers[0]
    assert handler.filter(logging.LogRecord("x", logging.ERROR, __file__, 1, "m", (), None))
    assert not handler.filter(logging.LogRecord("x", logging.INFO, __file__, 1, "m", (), None))
