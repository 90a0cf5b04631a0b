"""OpenAPI helpers for the ingest routes.

Trigger routes read their body themselves, so FastAPI cannot infer a
request schema; ``request_body`` documents it from the trigger's payload
model plus a minimal example. ``install_openapi_route`` serves the whole
document as YAML for SDK generators.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

import yaml
from fastapi import FastAPI, Response, Request

from fragment.utils.triggers import Trigger

__all__ = ["EXAMPLES", "request_body", "install_openapi_route"]

# Smallest body each trigger accepts, shown as the example in /docs.
EXAMPLES: Dict[str, Dict[str, Any]] = {
    "identify": {"userId": "019mr8mf4r", "traits": {"email": "pgibbons@example.com"}},
    "track": {"event": "Signed Up", "properties": {"plan": "Enterprise"}},
    "group": {"groupId": "0e8c78ea9d97a7b8185e8632", "traits": {"name": "Initech"}},
    "alias": {"userId": "507f191e81", "previousId": "39239-239239-239239-23923"},
    "page": {"name": "Home", "properties": {"path": "/"}},
    "screen": {"name": "Home", "properties": {"variation": "blue"}},
    "batch": {
        "batch": [
            {"type": "identify", "userId": "019mr8mf4r"},
            {"type": "track", "event": "Signed Up"},
        ],
        "context": {"library": {"name": "analytics.js"}},
    },
}


def request_body(trigger: Trigger) -> Dict[str, Any]:
    """Return the ``openapi_extra`` block describing *trigger*'s JSON body."""
    media: Dict[str, Any] = {"schema": trigger.schema.model_json_schema(by_alias=True)}
    if trigger.kind in EXAMPLES:
        media["example"] = EXAMPLES[trigger.kind]
    return {"requestBody": {"required": True, "content": {"application/json": media}}}


def install_openapi_route(app: FastAPI) -> None:
    """Attach a YAML exporter at /openapi.yaml, cacheable for 5 minutes."""

    @app.get("/openapi.yaml", include_in_schema=False)
    async def _openapi_yaml(_: Request) -> Response:  # noqa: WPS430
        document = yaml.safe_dump(app.openapi(), sort_keys=False)
        generated = datetime.now(timezone.utc).date().isoformat()
        return Response(
            content=f"# generated: {generated}\n{document}",
            media_type="application/x-yaml",
            headers={"Cache-Control": "public, max-age=300"},
        )
