"""
MIME decoder – raw RFC 822 bytes → DecodedMessage.

Walks the message for the first text/plain and text/html parts, skips
attachments, and normalises sender / recipient headers into Address
values (lower-cased email, display name stripped of quotes).
"""

import email
import email.policy
import email.utils
import logging

from partner_email_parser.constants import NO_SUBJECT
from partner_email_parser.exceptions import MessageDecodeError
from partner_email_parser.models import Address, DecodedMessage

log = logging.getLogger(__name__)


def decode_message(raw_content) -> DecodedMessage:
    """Decode *raw_content* (bytes or str) into a DecodedMessage.

    Raises MessageDecodeError when the content has the wrong type or
    carries no header fields at all.
    """
    if isinstance(raw_content, bytes):
        msg = email.message_from_bytes(raw_content, policy=email.policy.default)
    elif isinstance(raw_content, str):
        msg = email.message_from_string(raw_content, policy=email.policy.default)
    else:
        raise MessageDecodeError(
            f"unsupported message content type: {type(raw_content).__name__}"
        )

    if not msg.keys():
        raise MessageDecodeError("no RFC 822 headers found")

    body_text, body_html = _extract_bodies(msg)
    senders = _parse_address_list(msg.get_all("From"))

    decoded = DecodedMessage(
        subject=str(msg.get("Subject") or "").strip() or NO_SUBJECT,
        sender=senders[0] if senders else None,
        to=tuple(_parse_address_list(msg.get_all("To"))),
        cc=tuple(_parse_address_list(msg.get_all("Cc"))),
        date=_iso_date(msg.get("Date")),
        body_text=body_text,
        body_html=body_html,
    )
    log.debug("Decoded message: subject=%r from=%s to=%d cc=%d",
              decoded.subject[:80],
              decoded.sender.email if decoded.sender else "",
              len(decoded.to), len(decoded.cc))
    return decoded


def _extract_bodies(msg) -> tuple[str | None, str | None]:
    """Return (plain_text, html_text) from the first matching parts."""
    body_text: str | None = None
    body_html: str | None = None

    for part in msg.walk():
        if part.get_content_maintype() == "multipart":
            continue
        if part.get_content_disposition() == "attachment":
            continue

        content_type = part.get_content_type()
        if content_type not in ("text/plain", "text/html"):
            continue

        payload = _part_text(part)
        if payload is None:
            continue
        if content_type == "text/plain" and body_text is None:
            body_text = payload
        elif content_type == "text/html" and body_html is None:
            body_html = payload

    return body_text, body_html


def _part_text(part) -> str | None:
    try:
        payload = part.get_content()
    except (LookupError, UnicodeDecodeError) as exc:
        # Unknown charset – fall back to a lossy decode of the raw payload
        log.debug("get_content failed (%s); decoding payload as utf-8", exc)
        raw = part.get_payload(decode=True) or b""
        return raw.decode("utf-8", errors="replace")
    return payload if isinstance(payload, str) else None


def _parse_address_list(header_values) -> list[Address]:
    if not header_values:
        return []
    addresses = []
    for name, addr in email.utils.getaddresses([str(v) for v in header_values]):
        if not addr or "@" not in addr:
            continue
        clean_name = name.strip().replace('"', "").replace("'", "").strip() or None
        addresses.append(Address(email=addr.strip().lower(), name=clean_name))
    return addresses


def _iso_date(raw: str | None) -> str:
    if not raw:
        return ""
    try:
        return email.utils.parsedate_to_datetime(str(raw)).isoformat()
    except (TypeError, ValueError, IndexError):
        log.debug("Unparseable Date header: %r", raw)
        return ""
