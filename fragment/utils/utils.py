"""Misc cross-cutting helpers."""

from __future__ import annotations

import os


def get_env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(int(default))).lower() in {"1", "true", "yes"}


def field_label(alias: str) -> str:
    """Turn a JSON field name into the label used in validation paths.

    Examples:
        >>> field_label("userId")
        "UserId"
        >>> field_label("event")
        "Event"
    """
    if not alias:
        return alias
    return alias[0].upper() + alias[1:]
