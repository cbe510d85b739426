"""Event naming and pattern matching helpers."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

WILDCARD = "*"


def event_name(event: Any) -> str:
    """Resolve the identity string of *event*.

    Strings are their own name; classes and instances are named by the
    fully-qualified ``module.QualName`` of the class.
    """
    if isinstance(event, str):
        return event
    cls = event if isinstance(event, type) else type(event)
    return f"{cls.__module__}.{cls.__qualname__}"


@lru_cache(maxsize=2048)
def _compile_wildcard(pattern: str) -> re.Pattern[str]:
    parts = (re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(".*".join(parts), re.DOTALL)


def wildcard_match(pattern: str, value: str) -> bool:
    """Case-sensitive glob where ``*`` matches any run of characters.

    The pattern is anchored to the whole value; no other character is special.
    """
    if pattern == value:
        return True
    return _compile_wildcard(pattern).fullmatch(value) is not None


def pattern_matches(pattern: Any, name: str) -> bool:
    """Match *name* against a classification pattern.

    Patterns containing ``*`` are globs over the whole name, anything else is
    a literal namespace prefix. Non-string or empty patterns never match.
    """
    if not isinstance(pattern, str) or not pattern:
        return False
    if WILDCARD in pattern and wildcard_match(pattern, name):
        return True
    return name.startswith(pattern)
