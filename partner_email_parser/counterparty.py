"""
Counterparty extractor – works out who the external party of a message is.

Priority order (most authoritative first):
  1. Headers, classified by platform domain:
       * platform sender   → first off-platform recipient (To, then Cc)
       * external sender   → the sender itself
  2. Body email regex  – first address whose domain is off-platform
  3. Body name patterns – salutations / signatures, plausibility-checked

Purely deterministic; no AI and no side effects.
"""

import logging
import re
from typing import Iterable

from partner_email_parser.constants import (
    DEFAULT_PLATFORM_DOMAINS,
    EMAIL_RE,
    INVALID_NAME_PATTERNS,
    NAME_PATTERNS,
)
from partner_email_parser.models import CounterpartyInfo, DecodedMessage

log = logging.getLogger(__name__)

_LEADING_GREETING_RE = re.compile(r"^(Hi|Hello|Dear|Best|Regards|Thanks)\s+", re.IGNORECASE)
_TRAILING_PUNCT_RE = re.compile(r"[,，:;]$")
_LETTER_RE = re.compile(r"[a-zA-Z\u4e00-\u9fff]")


def email_domain(address: str) -> str:
    return address.rsplit("@", 1)[-1].lower().strip() if "@" in address else ""


def is_platform_address(address: str | None, platform_domains: Iterable[str] = DEFAULT_PLATFORM_DOMAINS) -> bool:
    """True if *address* is on a platform domain or one of its subdomains."""
    if not address:
        return False
    domain = email_domain(address)
    if not domain:
        return False
    return any(domain == d or domain.endswith("." + d) for d in platform_domains)


def extract_counterparty(
    decoded: DecodedMessage,
    body: str,
    platform_domains: Iterable[str] = DEFAULT_PLATFORM_DOMAINS,
) -> CounterpartyInfo:
    """Return the counterparty's email and name for one message."""
    platform_domains = tuple(platform_domains)
    name: str | None = None
    email: str | None = None

    # 1) Headers
    sender = decoded.sender
    if sender is not None:
        if is_platform_address(sender.email, platform_domains):
            for recipient in decoded.recipients:
                if not is_platform_address(recipient.email, platform_domains):
                    email = recipient.email
                    name = recipient.name
                    log.debug("Counterparty via recipient: %s", email)
                    break
        else:
            email = sender.email
            name = sender.name
            log.debug("Counterparty via sender: %s", email)

    # 2) Body email fallback
    if not email:
        email = _first_external_email(body, platform_domains)
        if email:
            log.debug("Counterparty email via body regex: %s", email)

    # 3) Body name fallback
    if not name:
        name = extract_name_from_content(body)
        if name:
            log.debug("Counterparty name via body pattern: %s", name)

    return CounterpartyInfo(name=name, email=email)


def _first_external_email(body: str, platform_domains: tuple[str, ...]) -> str | None:
    for m in EMAIL_RE.finditer(body or ""):
        candidate = m.group(1).lower()
        if not is_platform_address(candidate, platform_domains):
            return candidate
    return None


def extract_name_from_content(body: str) -> str | None:
    """Try each salutation/signature pattern; first plausible candidate wins."""
    if not body:
        return None
    for pattern in NAME_PATTERNS:
        m = pattern.search(body)
        if not m:
            continue
        candidate = _LEADING_GREETING_RE.sub("", m.group(1).strip())
        candidate = _TRAILING_PUNCT_RE.sub("", candidate).strip()
        if is_valid_name(candidate):
            return candidate
    return None


def is_valid_name(name: str) -> bool:
    if len(name) < 2 or len(name) > 100:
        return False
    if "@" in name or "http" in name:
        return False
    if name.isdigit():
        return False
    if not _LETTER_RE.search(name):
        return False
    return not any(p.search(name) for p in INVALID_NAME_PATTERNS)
