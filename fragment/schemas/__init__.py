"""Inbound request payloads accepted by the REST source."""

from .events import (  # noqa: F401
    MESSAGE_SCHEMAS,
    Alias,
    AnalyticsMessage,
    Batch,
    Group,
    Identify,
    Page,
    Screen,
    Track,
)

__all__ = [
    "AnalyticsMessage",
    "Identify",
    "Track",
    "Group",
    "Alias",
    "Page",
    "Screen",
    "Batch",
    "MESSAGE_SCHEMAS",
]
