"""Decoding and required-field validation for analytics payloads."""

from __future__ import annotations

import json
from typing import Any, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from fragment.models import Validation
from fragment.schemas import AnalyticsMessage
from fragment.utils.errors import DecodeError, EventValidationError
from fragment.utils.utils import field_label

ModelT = TypeVar("ModelT", bound=BaseModel)

__all__ = ["schema_path", "parse_body", "decode_payload", "find_violations", "validate_payload"]


def schema_path(schema: Type[BaseModel]) -> List[str]:
    return ["analytics", schema.__name__]


def parse_body(raw: Union[bytes, str], schema: Type[BaseModel]) -> Any:
    """Parse a raw request body as JSON, reporting failures against *schema*."""
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(
            validations=[Validation(message=str(exc), path=schema_path(schema))]
        ) from exc


def decode_payload(schema: Type[ModelT], body: Any, *, strict: bool = True) -> ModelT:
    """Decode *body* into *schema*.

    With ``strict`` set, top-level keys the schema does not know are
    rejected. Batch sub-events are decoded with ``strict=False`` so
    unknown keys are simply dropped.
    """
    if not isinstance(body, dict):
        raise DecodeError(
            validations=[
                Validation(
                    message=f"json: cannot decode {type(body).__name__} into {schema.__name__}",
                    path=schema_path(schema),
                )
            ]
        )

    if strict:
        known = {f.alias or name for name, f in schema.model_fields.items()}
        unknown = [key for key in body if key not in known]
        if unknown:
            raise DecodeError(
                validations=[
                    Validation(message=f'json: unknown field "{key}"', path=schema_path(schema))
                    for key in unknown
                ]
            )

    try:
        return schema.model_validate(body)
    except ValidationError as exc:
        raise DecodeError(
            validations=[
                Validation(
                    message=err["msg"],
                    path=schema_path(schema) + [str(part) for part in err["loc"]],
                )
                for err in exc.errors()
            ]
        ) from exc


def find_violations(payload: AnalyticsMessage) -> List[Validation]:
    """Return every required-field violation of *payload*, in rule order.

    Each rule is a group of alternatives; the group is satisfied when any
    member is a non-empty value. The violation is reported against the
    group's first member.
    """
    schema = type(payload)
    violations: List[Validation] = []
    for group in schema.required:
        if any(getattr(payload, name) for name in group):
            continue
        label = field_label(schema.alias_for(group[0]))
        violations.append(
            Validation(message=f"{label} must be set", path=schema_path(schema) + [label])
        )
    return violations


def validate_payload(payload: AnalyticsMessage) -> AnalyticsMessage:
    """Return *payload* unchanged, or raise EventValidationError listing all violations."""
    violations = find_violations(payload)
    if violations:
        raise EventValidationError(validations=violations)
    return payload
