"""
Content normalizer – turns decoded subject/body text into the flat,
bounded string the matchers work on.

Steps: markup → text (BeautifulSoup, script/style dropped, entities
decoded) → collapse whitespace → redact long base64-like blobs → trim →
truncate.
"""

import re

from bs4 import BeautifulSoup

from partner_email_parser.constants import ATTACHMENT_PLACEHOLDER, MAX_CONTENT_LENGTH
from partner_email_parser.models import DecodedMessage

_WS_RE = re.compile(r"\s+")
_BLOB_RE = re.compile(r"[A-Za-z0-9+/=]{100,}")


def html_to_text(text: str) -> str:
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text(separator=" ", strip=True)


def normalize_content(text: str | None, max_length: int = MAX_CONTENT_LENGTH) -> str:
    """Return *text* with markup, whitespace runs and opaque blobs removed."""
    if not text:
        return ""
    text = html_to_text(text)
    text = _WS_RE.sub(" ", text)
    text = _BLOB_RE.sub(ATTACHMENT_PLACEHOLDER, text)
    return text.strip()[:max_length]


def normalize_message(decoded: DecodedMessage, max_length: int = MAX_CONTENT_LENGTH) -> tuple[str, str]:
    """Return normalised (subject, body); plain text is preferred over HTML."""
    body = decoded.body_text or decoded.body_html or ""
    return (
        normalize_content(decoded.subject, max_length),
        normalize_content(body, max_length),
    )
