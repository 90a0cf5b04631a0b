"""Analytics ingest routes - one POST route per trigger of the REST source."""

from __future__ import annotations

import logging
from typing import Callable, Awaitable, Dict, List, Optional

from fastapi import APIRouter, Request, status

from fragment.models import (
    ErrorResponse,
    EventResponse,
    FlowDescriptor,
    FlowSummary,
    NormalizedEvent,
    SubEvent,
    SubEventResponse,
)
from fragment.openapi import request_body
from fragment.utils.canonical import decode_canonical
from fragment.utils.triggers import Route, Trigger

logger = logging.getLogger(__name__)

__all__ = ["build_router", "render_event"]


def _flows(flows: Optional[List[FlowDescriptor]], route: Route) -> Optional[List[FlowSummary]]:
    if flows is None or not route.show_meta:
        return None
    return [FlowSummary(integration=f.integration, action=f.action) for f in flows]


def _render_subevent(subevent: SubEvent, route: Route) -> SubEventResponse:
    return SubEventResponse(
        trigger=subevent.trigger,
        context=decode_canonical(subevent.context) if route.show_meta else None,
        data=decode_canonical(subevent.data) if route.show_data else None,
        flows=_flows(subevent.flows, route),
    )


def render_event(event: NormalizedEvent, route: Route) -> EventResponse:
    """Shape a normalized event for the HTTP response, honouring the display flags."""
    subevents = None
    if event.subevents is not None:
        subevents = [_render_subevent(s, route) for s in event.subevents]

    return EventResponse(
        version=event.version,
        sent_at=event.sent_at,
        context=decode_canonical(event.context) if route.show_meta else None,
        data=decode_canonical(event.data) if route.show_data else None,
        flows=_flows(event.flows, route),
        subevents=subevents,
    )


def _endpoint(trigger: Trigger) -> Callable[[Request], Awaitable[EventResponse]]:
    async def ingest(request: Request) -> EventResponse:
        event = trigger.extract(await request.body())
        logger.info(
            "event.extracted",
            extra={
                "trigger": trigger.kind,
                "flows": len(event.flows or []),
                "subevents": len(event.subevents or []),
            },
        )
        return render_event(event, trigger.route)

    ingest.__name__ = f"ingest_{trigger.kind}"
    return ingest


def build_router(triggers: Dict[str, Trigger]) -> APIRouter:
    """Register every trigger's route on a fresh router."""
    router = APIRouter(tags=["events"])
    for kind, trigger in triggers.items():
        router.add_api_route(
            trigger.route.path,
            _endpoint(trigger),
            methods=list(trigger.route.methods),
            response_model=EventResponse,
            response_model_exclude_none=True,
            status_code=status.HTTP_200_OK,
            responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
            name=f"ingest_{kind}",
            summary=f"Ingest a {kind} event",
            openapi_extra=request_body(trigger),
        )
    return router
