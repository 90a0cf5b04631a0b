"""Inbound analytics payloads, one model per event kind.

The shapes follow the Segment tracking spec: camelCase on the wire,
snake_case attributes in Python. Only the wire names are accepted on
input. Models are lenient about unknown keys; strict decoding for
single-event routes is enforced by the decoder in
``fragment.utils.event_validation``.

Each kind declares, as class-level data, the rules the validator and
normalizer read:

* ``kind`` - the discriminant string (``"track"``, ``"identify"`` ...).
* ``required`` - groups of attribute names; each group must have at least
  one non-empty member, and the first member names the violation.
* ``data_field`` - the free-form container serialized as the event data.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AnalyticsMessage(BaseModel):
    """Fields shared by every single-event kind."""

    model_config = ConfigDict(extra="ignore")

    kind: ClassVar[str] = ""
    required: ClassVar[Tuple[Tuple[str, ...], ...]] = ()
    data_field: ClassVar[Optional[str]] = None

    type: Optional[str] = None
    message_id: Optional[str] = Field(None, alias="messageId")
    anonymous_id: Optional[str] = Field(None, alias="anonymousId")
    user_id: Optional[str] = Field(None, alias="userId")
    timestamp: Optional[datetime] = None
    context: Optional[Dict[str, Any]] = None
    integrations: Optional[Dict[str, Any]] = None

    @classmethod
    def alias_for(cls, name: str) -> str:
        field = cls.model_fields[name]
        return field.alias or name

    def data(self) -> Optional[Dict[str, Any]]:
        if self.data_field is None:
            return None
        return getattr(self, self.data_field)


class Identify(AnalyticsMessage):
    kind = "identify"
    required = (("user_id", "anonymous_id"),)
    data_field = "traits"

    traits: Optional[Dict[str, Any]] = None


class Track(AnalyticsMessage):
    kind = "track"
    required = (("event",),)
    data_field = "properties"

    event: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class Group(AnalyticsMessage):
    kind = "group"
    required = (("group_id",),)
    data_field = "traits"

    group_id: Optional[str] = Field(None, alias="groupId")
    traits: Optional[Dict[str, Any]] = None


class Alias(AnalyticsMessage):
    kind = "alias"
    required = (("user_id",), ("previous_id",))

    previous_id: Optional[str] = Field(None, alias="previousId")


class Page(AnalyticsMessage):
    kind = "page"
    data_field = "properties"

    name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class Screen(AnalyticsMessage):
    kind = "screen"
    data_field = "properties"

    name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class Batch(BaseModel):
    """Envelope for ``/v1/batch``: heterogeneous sub-events under ``batch``."""

    model_config = ConfigDict(extra="ignore")

    kind: ClassVar[str] = "batch"

    events: List[Any] = Field(..., alias="batch")
    context: Optional[Dict[str, Any]] = None
    timestamp: Optional[datetime] = None


MESSAGE_SCHEMAS: Dict[str, type[AnalyticsMessage]] = {
    schema.kind: schema for schema in (Identify, Track, Group, Alias, Page, Screen)
}
