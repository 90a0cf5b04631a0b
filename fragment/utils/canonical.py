"""Canonical byte encoding for free-form context and data maps."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fragment.utils.errors import EncodeError

__all__ = ["encode_canonical", "decode_canonical"]


def encode_canonical(value: Optional[Dict[str, Any]]) -> Optional[bytes]:
    """Serialize *value* to compact, key-sorted UTF-8 JSON.

    ``None`` stays ``None``: an absent container is never encoded as ``{}``.
    Raises EncodeError (without a field path) when the value cannot be
    represented as strict JSON, e.g. NaN or infinite floats.
    """
    if value is None:
        return None
    try:
        return json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError() from exc


def decode_canonical(raw: Optional[bytes]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    return json.loads(raw)
