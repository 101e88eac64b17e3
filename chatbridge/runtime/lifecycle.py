"""Process bootstrap and the `chatbridge-config` entrypoint.

The service builds exactly one ConfigService here and injects it into its
components. A ConfigError during construction aborts startup before anything
binds to a port.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

from chatbridge.config import ConfigError, ConfigService
from chatbridge.config.schema import iter_env_variables
from chatbridge.observability.logging import configure_logging, get_logger

logger = get_logger("chatbridge.runtime")

_SECRET_KEYS = frozenset({"URI", "KEY", "SECRET"})


def _redact_secrets(obj: Any) -> Any:
    """Hide connection strings and credentials in human-facing dumps."""

    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if k in _SECRET_KEYS and v is not None:
                out[k] = "<redacted>"
            else:
                out[k] = _redact_secrets(v)
        return out
    if isinstance(obj, list):
        return [_redact_secrets(x) for x in obj]
    return obj


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatbridge-config",
        description="Load and validate the chatbridge configuration",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level used until the LOG section is loaded",
    )
    parser.add_argument(
        "--cwd",
        type=Path,
        help="Directory holding src/env.yml and .env (defaults to the working directory)",
    )

    sub = parser.add_subparsers(dest="command")

    check_p = sub.add_parser("check", help="Load the configuration and exit")
    check_p.set_defaults(command="check")

    print_p = sub.add_parser("print-config", help="Load and print the resolved config")
    print_p.set_defaults(command="print-config")

    env_p = sub.add_parser("list-env", help="List managed-mode environment variables")
    env_p.set_defaults(command="list-env")

    return parser


def bootstrap(
    environ: Mapping[str, str] | None = None,
    *,
    cwd: Path | None = None,
    log_level: str = "INFO",
) -> ConfigService:
    """Load configuration, then reconfigure logging from its LOG section.

    Raises:
        ConfigError: Propagated unchanged; the caller must not start.
    """

    configure_logging(log_level)
    service = ConfigService(environ, cwd=cwd)

    log_conf = service.get("LOG")
    configure_logging(log_level, enabled_levels=log_conf.level, color=bool(log_conf.color))
    return service


def main(argv: Sequence[str] | None = None, *, environ: Mapping[str, str] | None = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    parser = _build_parser()
    try:
        ns = parser.parse_args(argv_list)
    except SystemExit as e:
        code = e.code
        return int(code) if isinstance(code, int) else 1

    command = ns.command or "check"

    if command == "list-env":
        for var in iter_env_variables():
            line = f"{var.name}\t{var.kind}\t{var.key_path}"
            if var.required:
                line += "\trequired"
            if var.aliases:
                line += f"\tlegacy={','.join(var.aliases)}"
            sys.stdout.write(line + "\n")
        return 0

    try:
        service = bootstrap(environ, cwd=ns.cwd, log_level=ns.log_level)
    except ConfigError as e:
        logger.error("config_invalid", error=str(e), key_path=e.path)
        return 1

    if command == "print-config":
        sys.stdout.write(json.dumps(_redact_secrets(service.to_dict()), ensure_ascii=False, indent=2))
        sys.stdout.write("\n")

    return 0
