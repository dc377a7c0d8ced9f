"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data into the internal envelope and back:
  - raw request mapping -> NotificationEnvelope (the envelope builder)
  - NotificationEnvelope -> queue message body (JSON object)
  - queue message body -> NotificationEnvelope (consumer side)
- It validates shape and required fields, but it does not route or deliver.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
from typing import Any, Mapping
import uuid

from ..domain.envelope import ChannelType, NotificationEnvelope, Priority
from ..errors import ValidationError
from ..types import MessageBody, QueueAttributes, RawRequest


def build_envelope(raw: RawRequest) -> NotificationEnvelope:
    """Normalize one raw notification request into a fresh envelope.

    Pure transformation: a new id is assigned on every call, nothing else
    happens. Missing `subject` stays `None`; defaults belong to the channel
    adapters.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("notification request must be an object")

    return _to_envelope(raw, envelope_id=str(uuid.uuid4()))


def envelope_to_message_body(
    envelope: NotificationEnvelope,
    *,
    queued_at: datetime | None = None,
) -> MessageBody:
    """Serialize an envelope into the queue message body."""
    stamp = queued_at or datetime.now(tz=UTC)
    body: MessageBody = {
        "id": envelope.id,
        "type": envelope.channel_type.value,
        "to": envelope.recipient,
        "subject": envelope.subject,
        "body": envelope.body,
        "data": dict(envelope.data) if envelope.data is not None else None,
        "priority": envelope.priority.value,
        "userId": envelope.user_id,
        "metadata": dict(envelope.metadata) if envelope.metadata is not None else None,
        "queuedAt": stamp.isoformat(),
    }
    return {key: value for key, value in body.items() if value is not None}


def encode_message_body(body: MessageBody) -> str:
    return json.dumps(body, separators=(",", ":"), default=str)


def message_attributes(envelope: NotificationEnvelope) -> QueueAttributes:
    """Routing attributes consumers can filter on without decoding the body."""
    return {"type": envelope.channel_type.value, "priority": envelope.priority.value}


def parse_message_body(raw: bytes | str | Mapping[str, Any]) -> NotificationEnvelope:
    """Decode a queued message body back into an envelope.

    The envelope id travels with the message and is kept as-is, so consumers
    can track deliveries idempotently.
    """
    if isinstance(raw, Mapping):
        payload: Any = dict(raw)
    else:
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        except UnicodeDecodeError as exc:
            raise ValidationError(f"message body is not valid UTF-8: {exc}") from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"message body is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ValidationError("message body must decode to a JSON object")

    envelope_id = _as_optional_str(payload.get("id"))
    if envelope_id is None:
        raise ValidationError("Missing required field: id")
    return _to_envelope(payload, envelope_id=envelope_id)


def _to_envelope(raw: Mapping[str, Any], *, envelope_id: str) -> NotificationEnvelope:
    return NotificationEnvelope(
        id=envelope_id,
        channel_type=_as_channel_type(raw.get("type")),
        recipient=_as_required_str(raw.get("to"), "to"),
        body=_as_required_text(raw.get("body"), "body"),
        subject=_as_optional_str(raw.get("subject")),
        data=_as_optional_mapping(raw.get("data"), "data"),
        priority=_as_priority(raw.get("priority")),
        user_id=_as_optional_str(raw.get("userId")),
        metadata=_as_optional_mapping(raw.get("metadata"), "metadata"),
    )


def _as_channel_type(value: Any) -> ChannelType:
    text = _as_required_str(value, "type")
    try:
        return ChannelType(text)
    except ValueError as exc:
        raise ValidationError("type must be email, sms, or push") from exc


def _as_priority(value: Any) -> Priority:
    text = _as_optional_str(value)
    if text is None:
        return Priority.NORMAL
    try:
        return Priority(text)
    except ValueError as exc:
        raise ValidationError("priority must be high, normal, or low") from exc


def _as_required_str(value: Any, field_name: str) -> str:
    text = _require_str(value, field_name).strip()
    if not text:
        raise ValidationError(f"Missing required field: {field_name}")
    return text


def _as_required_text(value: Any, field_name: str) -> str:
    text = _require_str(value, field_name)
    if not text.strip():
        raise ValidationError(f"Missing required field: {field_name}")
    return text


def _require_str(value: Any, field_name: str) -> str:
    if value is None:
        raise ValidationError(f"Missing required field: {field_name}")
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_optional_mapping(value: Any, field_name: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError(f"{field_name} must be an object")
    return {str(key): item for key, item in value.items()}
