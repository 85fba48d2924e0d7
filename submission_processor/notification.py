"""
Parsing of inbound submission notifications.
Handles Pub/Sub push envelopes, SNS-style records and bare JSON messages.
"""

import base64
import json
from typing import Any, Dict, Tuple, Union

try:
    from errors import MalformedPayload
    from models import UNKNOWN_ID, SubmissionEvent
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.errors import MalformedPayload
    from submission_processor.models import UNKNOWN_ID, SubmissionEvent

SOURCE_URL_FIELDS = ("releaseUrl", "submissionUrl")
ASSIGNMENT_ID_FIELDS = ("assignmentId", "assignment_Id")

Envelope = Union[Dict[str, Any], str, bytes]


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"Notification message is not valid JSON: {e}") from e


def unwrap_message(envelope: Envelope) -> Dict[str, Any]:
    """Extract the inner submission message from a notification envelope.

    Args:
        envelope: Pub/Sub event data, SNS event, or raw JSON message

    Returns:
        The decoded message object
    """
    if isinstance(envelope, (bytes, bytearray)):
        try:
            envelope = envelope.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPayload(f"Notification is not UTF-8 text: {e}") from e

    if isinstance(envelope, str):
        message = _loads(envelope)

    elif isinstance(envelope, dict) and isinstance(envelope.get("message"), dict):
        # Pub/Sub: {"message": {"data": "<base64 JSON>"}}
        data = envelope["message"].get("data")
        if not data:
            raise MalformedPayload("Pub/Sub message has no data")
        if not isinstance(data, (str, bytes, bytearray)):
            raise MalformedPayload(f"Pub/Sub message data must be base64 text, not {type(data).__name__}")
        try:
            decoded = base64.b64decode(data, validate=True).decode("utf-8")
        except (TypeError, ValueError) as e:
            raise MalformedPayload(f"Pub/Sub message data is not base64 text: {e}") from e
        message = _loads(decoded)

    elif isinstance(envelope, dict) and "Records" in envelope:
        # SNS: {"Records": [{"Sns": {"Message": "<JSON>"}}]}
        try:
            raw = envelope["Records"][0]["Sns"]["Message"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedPayload("SNS notification has no message") from e
        message = raw if isinstance(raw, dict) else _loads(raw)

    elif isinstance(envelope, dict):
        message = envelope

    else:
        raise MalformedPayload(f"Unsupported notification type: {type(envelope).__name__}")

    if not isinstance(message, dict):
        raise MalformedPayload("Notification message must be a JSON object")

    return message


def _first_present(message: Dict[str, Any], names) -> Any:
    for name in names:
        value = message.get(name)
        if value not in (None, ""):
            return value
    return None


def parse_notification(envelope: Envelope, source_url_field: str = "releaseUrl") -> SubmissionEvent:
    """Parse a notification into a SubmissionEvent.

    Args:
        envelope: Notification as delivered to the function
        source_url_field: Message field holding the download URL

    Returns:
        SubmissionEvent with all fields present
    """
    message = unwrap_message(envelope)

    url_fields = (source_url_field,) + tuple(f for f in SOURCE_URL_FIELDS if f != source_url_field)

    user_id = _first_present(message, ("userId",))
    assignment_id = _first_present(message, ASSIGNMENT_ID_FIELDS)
    source_url = _first_present(message, url_fields)

    missing = [
        name
        for name, value in (
            ("userId", user_id),
            ("assignmentId", assignment_id),
            (source_url_field, source_url),
        )
        if value is None
    ]
    if missing:
        raise MalformedPayload(f"Notification is missing required fields: {', '.join(missing)}")

    return SubmissionEvent(
        user_id=str(user_id),
        assignment_id=str(assignment_id),
        source_url=str(source_url),
    )


def peek_identity(envelope: Envelope) -> Tuple[str, str]:
    """Best-effort (userId, assignmentId) for recording failures; never raises."""
    try:
        message = unwrap_message(envelope)
    except MalformedPayload:
        return UNKNOWN_ID, UNKNOWN_ID

    user_id = _first_present(message, ("userId",))
    assignment_id = _first_present(message, ASSIGNMENT_ID_FIELDS)
    return (
        str(user_id) if user_id is not None else UNKNOWN_ID,
        str(assignment_id) if assignment_id is not None else UNKNOWN_ID,
    )
