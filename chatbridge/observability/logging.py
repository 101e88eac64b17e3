from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Iterable

_RESERVED = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)

# LOG.LEVEL names -> stdlib level numbers.
LEVEL_NAMES: dict[str, int] = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "LOG": logging.INFO,
    "DEBUG": logging.DEBUG,
    "VERBOSE": logging.DEBUG,
    "DARK": logging.DEBUG,
}

_COLORS = {
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1;31m",
}
_RESET = "\x1b[0m"


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in record.__dict__.items():
        if k in _RESERVED or k.startswith("_"):
            continue
        try:
            json.dumps(v)
            out[k] = v
        except TypeError:
            out[k] = repr(v)
    return out


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class ColorFormatter(logging.Formatter):
    """Human-readable `LEVEL logger message k=v` lines with ANSI colors."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        color = _COLORS.get(record.levelno, "")
        fields = " ".join(f"{k}={v}" for k, v in _extra_fields(record).items())
        line = f"{color}{record.levelname:<7}{_RESET} {record.name} {record.getMessage()}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class LevelSetFilter(logging.Filter):
    """Pass only records whose level is in an explicit set.

    `LOG.LEVEL` lists the enabled levels rather than a threshold, so
    `["ERROR", "DEBUG"]` hides INFO and WARNING records.
    """

    def __init__(self, enabled: Iterable[str]):
        super().__init__()
        self.levels = frozenset(LEVEL_NAMES[n] for n in enabled if n in LEVEL_NAMES)

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # CRITICAL has no LOG.LEVEL name and is always shown.
        return record.levelno >= logging.CRITICAL or record.levelno in self.levels


class KVLogger:
    """A tiny structured logging adapter."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("debug", msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("info", msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("warning", msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("error", msg, *args, **kwargs)

    def _log(self, level: str, msg: str, *args: object, **kwargs: object) -> None:
        exc_info = kwargs.pop("exc_info", None)
        extra_dict: dict[str, object] = dict(kwargs)

        log_fn = getattr(self._logger, level)
        log_fn(msg, *args, extra=extra_dict, exc_info=exc_info)


def configure_logging(
    level: str = "INFO",
    *,
    enabled_levels: Iterable[str] | None = None,
    color: bool = False,
) -> None:
    """Configure root logging with a single stderr handler.

    Calling it again replaces the previous handler, so bootstrap can start
    with a plain level and reconfigure once the LOG section is known.
    """

    root = logging.getLogger()
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(ColorFormatter() if color else JsonFormatter())

    if enabled_levels is not None:
        level_filter = LevelSetFilter(enabled_levels)
        handler.addFilter(level_filter)
        # The handler filter decides; let everything reach it.
        root.setLevel(min(level_filter.levels, default=logging.ERROR))
    else:
        root.setLevel(level.upper())

    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str = "chatbridge") -> KVLogger:
    return KVLogger(logging.getLogger(name))
