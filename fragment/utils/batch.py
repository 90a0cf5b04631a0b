"""Batch dispatch: demultiplex a ``/v1/batch`` envelope into sub-events.

Sub-events are processed sequentially, in submission order. Items whose
``type`` is missing, not a string, or not a supported kind are skipped.
Items that fail decoding, validation or encoding are rejected: the
failure is logged and kept as a diagnostic, and the rest of the batch
carries on. Neither case fails the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, Union

from fragment.models import NormalizedEvent, SubEvent
from fragment.schemas import MESSAGE_SCHEMAS, AnalyticsMessage, Batch
from fragment.utils.canonical import encode_canonical
from fragment.utils.errors import FragmentError
from fragment.utils.event_validation import decode_payload, parse_body, schema_path
from fragment.utils.normalizer import effective_timestamp, normalize_message

logger = logging.getLogger(__name__)

__all__ = ["Rejection", "BatchResult", "dispatch_batch", "extract_batch"]


@dataclass
class Rejection:
    """A sub-event dropped because it failed processing."""

    index: int
    kind: str
    error: FragmentError

    def as_log_extra(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "trigger": self.kind,
            "reason": self.error.message,
            "validations": [v.model_dump() for v in self.error.validations],
        }


@dataclass
class BatchResult:
    accepted: List[SubEvent] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)


def _kind_of(item: Any) -> Optional[str]:
    if not isinstance(item, dict):
        return None
    kind = item.get("type")
    return kind if isinstance(kind, str) else None


def dispatch_batch(
    items: Sequence[Any],
    schemas: Mapping[str, Type[AnalyticsMessage]] = MESSAGE_SCHEMAS,
) -> BatchResult:
    """Fold *items* into accepted sub-events, rejections and skipped indexes."""
    result = BatchResult()
    for index, item in enumerate(items):
        kind = _kind_of(item)
        schema = schemas.get(kind) if kind is not None else None
        if schema is None:
            logger.debug("batch.subevent_skipped", extra={"index": index, "trigger": kind})
            result.skipped.append(index)
            continue

        try:
            subevent = normalize_message(schema, item, strict=False)
        except FragmentError as exc:
            rejection = Rejection(index=index, kind=kind, error=exc)
            logger.error("batch.subevent_rejected", extra=rejection.as_log_extra())
            result.rejected.append(rejection)
            continue

        result.accepted.append(subevent)
    return result


def extract_batch(raw: Union[bytes, str]) -> NormalizedEvent:
    """Decode a batch envelope leniently and normalize every sub-event it holds."""
    envelope = decode_payload(Batch, parse_body(raw, Batch), strict=False)
    sent_at = effective_timestamp(envelope.timestamp, schema_path(Batch) + ["Timestamp"])

    result = dispatch_batch(envelope.events)
    if result.rejected or result.skipped:
        logger.info(
            "batch.partial",
            extra={
                "accepted": len(result.accepted),
                "rejected": len(result.rejected),
                "skipped": len(result.skipped),
            },
        )

    return NormalizedEvent(
        context=encode_canonical(envelope.context),
        sent_at=sent_at,
        subevents=result.accepted,
    )
