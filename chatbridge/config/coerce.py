"""Coercion rules for values read from environment variables.

Every raw value is either a string or ``None`` (variable unset).
"""

from __future__ import annotations

import re

from chatbridge.config.errors import MalformedValueError, SourceUnavailableError
from chatbridge.config.model import DelInstance, DelInstanceFlag, DelInstanceTimeout

_INT_PREFIX_RE = re.compile(r"\s*([+-]?[0-9]+)")

BOOLEAN_LITERALS = frozenset({"true", "false"})


def parse_bool(raw: str | None) -> bool:
    # Only the exact literal counts; "True", "1" and "yes" are all false.
    return raw == "true"


def parse_int(raw: str | None) -> int | None:
    """Parse the leading base-10 integer of ``raw``.

    Returns ``None`` when ``raw`` is unset or does not start with digits.
    Callers decide whether that is acceptable.
    """

    if raw is None:
        return None
    match = _INT_PREFIX_RE.match(raw)
    if match is None:
        return None
    return int(match.group(1))


def parse_list(raw: str | None, *, path: str) -> tuple[str, ...]:
    if raw is None:
        raise SourceUnavailableError("environment variable is not set", path=path)
    if raw == "":
        raise MalformedValueError("comma-separated list must not be empty", path=path)
    return tuple(raw.split(","))


def parse_del_instance(raw: str | None) -> DelInstance:
    if raw in BOOLEAN_LITERALS:
        return DelInstanceFlag(enabled=raw == "true")
    return DelInstanceTimeout(minutes=parse_int(raw))
