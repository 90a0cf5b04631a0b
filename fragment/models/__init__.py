from __future__ import annotations

"""Unified models namespace - normalized events, options and API bodies.

Inbound payload shapes live in ``fragment.schemas``; everything the core
*produces* lives here so call-sites can simply::

    from fragment.models import NormalizedEvent, SubEvent, Options
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fragment import VERSION
from fragment.schemas import Alias, Group, Identify, Page, Screen, Track

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class Validation(BaseModel):
    """One violation: what went wrong and where."""

    message: str
    path: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    status_code: int = Field(..., alias="statusCode")
    message: str
    validations: List[Validation] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Normalized events
# ---------------------------------------------------------------------------


class FlowDescriptor(BaseModel):
    """Names the downstream action to run and carries the payload it acts on."""

    model_config = ConfigDict(frozen=True)

    integration: str = "segment"
    action: str
    payload: Union[Identify, Track, Group, Alias, Page, Screen]


class SubEvent(BaseModel):
    trigger: str
    context: Optional[bytes] = None
    data: Optional[bytes] = None
    sent_at: datetime
    flows: List[FlowDescriptor] = Field(default_factory=list)


class NormalizedEvent(BaseModel):
    """Canonical output of a trigger.

    A single-kind submission fills ``flows``; a batch fills ``subevents``.
    Never both.
    """

    version: str = VERSION
    context: Optional[bytes] = None
    data: Optional[bytes] = None
    sent_at: datetime
    flows: Optional[List[FlowDescriptor]] = None
    subevents: Optional[List[SubEvent]] = None

    @model_validator(mode="after")
    def _flows_xor_subevents(self) -> "NormalizedEvent":
        if (self.flows is None) == (self.subevents is None):
            raise ValueError("exactly one of flows or subevents must be set")
        return self


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class Options(BaseModel):
    """Options the REST source is configured with, fixed at startup."""

    model_config = ConfigDict(frozen=True)

    # Display the event's context and flows in HTTP responses.
    show_meta: bool = True
    # Display the event's data in HTTP responses. Disable it if the payloads
    # may carry sensitive values such as private tokens.
    show_data: bool = True
    # Prefix for every exposed endpoint, e.g. "/cdp".
    prefix: str = ""


# ---------------------------------------------------------------------------
# HTTP response bodies
# ---------------------------------------------------------------------------


class FlowSummary(BaseModel):
    integration: str
    action: str


class SubEventResponse(BaseModel):
    trigger: str
    context: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None
    flows: Optional[List[FlowSummary]] = None


class EventResponse(BaseModel):
    version: str
    sent_at: datetime
    context: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None
    flows: Optional[List[FlowSummary]] = None
    subevents: Optional[List[SubEventResponse]] = None


__all__ = [
    "Validation",
    "ErrorResponse",
    "FlowDescriptor",
    "SubEvent",
    "NormalizedEvent",
    "Options",
    "FlowSummary",
    "SubEventResponse",
    "EventResponse",
]
