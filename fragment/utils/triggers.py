"""Trigger registry for the REST source.

A trigger pairs an HTTP route with the extraction logic for one kind.
Every kind is reachable with ``POST {prefix}/v1/{kind}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Tuple, Type, Union

from pydantic import BaseModel

from fragment.models import NormalizedEvent, Options
from fragment.schemas import MESSAGE_SCHEMAS, AnalyticsMessage, Batch
from fragment.utils.batch import extract_batch
from fragment.utils.event_validation import parse_body
from fragment.utils.normalizer import normalize_message, to_event

__all__ = ["SUPPORTED_KINDS", "Route", "Trigger", "extract_message", "build_triggers"]

SUPPORTED_KINDS: Tuple[str, ...] = (
    "identify",
    "track",
    "group",
    "alias",
    "page",
    "screen",
    "batch",
)

Extractor = Callable[[Union[bytes, str]], NormalizedEvent]


@dataclass(frozen=True)
class Route:
    methods: Tuple[str, ...]
    path: str
    show_meta: bool
    show_data: bool


@dataclass(frozen=True)
class Trigger:
    kind: str
    schema: Type[BaseModel]
    route: Route
    extract: Extractor

    def __str__(self) -> str:
        return self.kind


def extract_message(schema: Type[AnalyticsMessage], raw: Union[bytes, str]) -> NormalizedEvent:
    """Run a bare single-kind submission through decode, validate and normalize.

    Unlike batch sub-events, unknown top-level fields are rejected here.
    """
    subevent = normalize_message(schema, parse_body(raw, schema), strict=True)
    return to_event(subevent)


def build_triggers(options: Options) -> Dict[str, Trigger]:
    """Return the triggers of the REST source keyed by kind."""
    triggers: Dict[str, Trigger] = {}
    for kind in SUPPORTED_KINDS:
        route = Route(
            methods=("POST",),
            path=f"{options.prefix}/v1/{kind}",
            show_meta=options.show_meta,
            show_data=options.show_data,
        )
        if kind == Batch.kind:
            triggers[kind] = Trigger(kind=kind, schema=Batch, route=route, extract=extract_batch)
        else:
            schema = MESSAGE_SCHEMAS[kind]
            triggers[kind] = Trigger(
                kind=kind,
                schema=schema,
                route=route,
                extract=partial(extract_message, schema),
            )
    return triggers
