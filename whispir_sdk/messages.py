"""JSON bodies for the messages resource.

A plain string content becomes the SMS body. A mapping can carry several
channels at once:

    {"body": "sms text", "email": "<p>hi</p>", "emailType": "text/html",
     "web": "<p>hi</p>", "webType": "text/html"}
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from whispir_sdk.errors import EncodingError


DEFAULT_EMAIL_TYPE = "text/plain"
DEFAULT_WEB_TYPE = "text/html"


def build_message_body(
    recipient: str,
    subject: str,
    content: str | Mapping[str, str],
    options: Mapping[str, str] | None = None,
) -> str:
    """Serialize a message for POST /messages.

    Args:
        recipient: Phone number, email address or contact reference.
        subject: Message subject.
        content: SMS text, or a mapping of channel keys (see module docstring).
        options: Optional extras: callbackId, pushNotifications.

    Returns:
        The JSON document as a string.

    Raises:
        EncodingError: If the payload cannot be serialized.
    """
    payload: dict[str, Any] = {"to": recipient, "subject": subject}

    if isinstance(content, str):
        payload["body"] = content
    else:
        if "body" in content:
            payload["body"] = content["body"]
        if "email" in content:
            payload["email"] = {
                "body": content["email"],
                "type": content.get("emailType", DEFAULT_EMAIL_TYPE),
            }
        if "web" in content:
            payload["web"] = {
                "body": content["web"],
                "type": content.get("webType", DEFAULT_WEB_TYPE),
            }

    if options:
        if "callbackId" in options:
            payload["callbackId"] = options["callbackId"]
        if "pushNotifications" in options:
            payload["features"] = {
                "pushOptions": {"notifications": options["pushNotifications"]}
            }

    try:
        return json.dumps(payload)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Could not encode message body: {e}") from e
