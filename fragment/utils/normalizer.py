"""Turn validated payloads into normalized events.

Normalization never performs I/O. The only outside input is the wall
clock, read when a payload carries no timestamp of its own.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Type

from fragment.models import FlowDescriptor, NormalizedEvent, SubEvent, Validation
from fragment.schemas import AnalyticsMessage
from fragment.utils.canonical import encode_canonical
from fragment.utils.errors import DecodeError
from fragment.utils.event_validation import decode_payload, schema_path, validate_payload

__all__ = ["effective_timestamp", "normalize", "normalize_message", "to_event"]

# Go-style zero instant some SDKs send for "no timestamp"
_ZERO_INSTANT = datetime(1, 1, 1, tzinfo=timezone.utc)


def effective_timestamp(timestamp: Optional[datetime], path: Sequence[str] = ()) -> datetime:
    """Return *timestamp* as an aware UTC datetime, defaulting unset values to now.

    Offsets that push the instant outside the representable UTC range
    (e.g. ``0001-01-01T00:00:00+01:00``) raise DecodeError against *path*.
    """
    if timestamp is None:
        return datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    try:
        if timestamp == _ZERO_INSTANT:
            return datetime.now(timezone.utc)
        return timestamp.astimezone(timezone.utc)
    except (OverflowError, ValueError) as exc:
        raise DecodeError(
            validations=[Validation(message=f"timestamp out of range: {exc}", path=list(path))]
        ) from exc


def normalize(payload: AnalyticsMessage) -> SubEvent:
    """Normalize a validated payload into a sub-event.

    The flow descriptor carries a copy of the payload with its timestamp
    defaulted; the caller's payload is left untouched.
    """
    sent_at = effective_timestamp(
        payload.timestamp, schema_path(type(payload)) + ["Timestamp"]
    )
    view = payload.model_copy(update={"timestamp": sent_at})

    return SubEvent(
        trigger=payload.kind,
        context=encode_canonical(payload.context),
        data=encode_canonical(payload.data()),
        sent_at=sent_at,
        flows=[FlowDescriptor(action=payload.kind, payload=view)],
    )


def normalize_message(schema: Type[AnalyticsMessage], body: Any, *, strict: bool) -> SubEvent:
    """Decode, validate and normalize one message of kind *schema*."""
    payload = decode_payload(schema, body, strict=strict)
    return normalize(validate_payload(payload))


def to_event(subevent: SubEvent) -> NormalizedEvent:
    """Wrap a single sub-event as the top-level event of a bare submission."""
    return NormalizedEvent(
        context=subevent.context,
        data=subevent.data,
        sent_at=subevent.sent_at,
        flows=list(subevent.flows),
    )
