import pytest

from fragment.schemas import Alias, Batch, Group, Identify, Page, Screen, Track
from fragment.utils.errors import DecodeError, EventValidationError
from fragment.utils.event_validation import (
    decode_payload,
    find_violations,
    parse_body,
    validate_payload,
)

# ---------------------------------------------------------------------------
# Required fields per kind
# ---------------------------------------------------------------------------

MINIMAL = {
    Identify: {"userId": "u1"},
    Track: {"event": "Signed Up"},
    Group: {"groupId": "g1"},
    Alias: {"userId": "u1", "previousId": "anon-1"},
    Page: {},
    Screen: {},
}


@pytest.mark.parametrize("schema", list(MINIMAL))
def test_minimal_payload_is_valid(schema):
    payload = decode_payload(schema, MINIMAL[schema])
    assert validate_payload(payload) is payload


@pytest.mark.parametrize(
    "schema, missing, label",
    [
        (Identify, "userId", "UserId"),
        (Track, "event", "Event"),
        (Group, "groupId", "GroupId"),
        (Alias, "previousId", "PreviousId"),
        (Alias, "userId", "UserId"),
    ],
)
def test_missing_required_field_reports_path(schema, missing, label):
    body = dict(MINIMAL[schema])
    body.pop(missing)
    payload = decode_payload(schema, body)

    with pytest.raises(EventValidationError) as exc:
        validate_payload(payload)

    assert exc.value.status_code == 400
    [violation] = exc.value.validations
    assert violation.path == ["analytics", schema.__name__, label]
    assert violation.message == f"{label} must be set"


def test_identify_accepts_anonymous_id():
    payload = decode_payload(Identify, {"anonymousId": "anon-1"})
    assert find_violations(payload) == []


def test_empty_string_counts_as_missing():
    payload = decode_payload(Track, {"event": ""})
    [violation] = find_violations(payload)
    assert violation.path == ["analytics", "Track", "Event"]


def test_all_violations_are_reported_in_order():
    payload = decode_payload(Alias, {})
    violations = find_violations(payload)
    assert [v.path[-1] for v in violations] == ["UserId", "PreviousId"]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def test_strict_decoding_rejects_unknown_field():
    with pytest.raises(DecodeError) as exc:
        decode_payload(Track, {"event": "A", "color": "blue"})

    [violation] = exc.value.validations
    assert violation.path == ["analytics", "Track"]
    assert '"color"' in violation.message


def test_lenient_decoding_drops_unknown_field():
    payload = decode_payload(Track, {"event": "A", "color": "blue"}, strict=False)
    assert payload.event == "A"
    assert not hasattr(payload, "color")


def test_strict_decoding_rejects_attribute_names():
    with pytest.raises(DecodeError) as exc:
        decode_payload(Track, {"event": "A", "user_id": "u1", "message_id": "m"})

    assert [v.message for v in exc.value.validations] == [
        'json: unknown field "user_id"',
        'json: unknown field "message_id"',
    ]
    assert all(v.path == ["analytics", "Track"] for v in exc.value.validations)


def test_lenient_decoding_ignores_attribute_names():
    payload = decode_payload(Identify, {"user_id": "u1", "userId": "u2"}, strict=False)
    assert payload.user_id == "u2"


def test_wrong_type_is_a_decode_error_with_location():
    with pytest.raises(DecodeError) as exc:
        decode_payload(Track, {"event": "A", "properties": ["not", "a", "map"]})

    assert exc.value.validations[0].path == ["analytics", "Track", "properties"]


def test_non_object_body_is_rejected():
    with pytest.raises(DecodeError):
        decode_payload(Page, ["page"])


def test_batch_envelope_requires_batch_list():
    with pytest.raises(DecodeError) as exc:
        decode_payload(Batch, {"context": {}}, strict=False)

    assert exc.value.validations[0].path == ["analytics", "Batch", "batch"]


def test_parse_body_reports_malformed_json():
    with pytest.raises(DecodeError) as exc:
        parse_body(b'{"event": ', Track)

    assert exc.value.validations[0].path == ["analytics", "Track"]
