"""Shared fixtures: .eml builder, sample registries and a scripted chat client."""
from __future__ import annotations

import os
import sys

import pytest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from partner_email_parser.llm_client import ChatResponse
from partner_email_parser.models import ProjectRecord, StageRecord, SubStageRecord


def build_eml(
    subject="Hello",
    sender="partner@external.com",
    to="ops@bluefocus.com",
    cc=None,
    body="Just checking in.",
    html=None,
    date="Mon, 02 Mar 2026 10:00:00 +0800",
) -> bytes:
    """Assemble a minimal RFC 822 message (plain, or multipart/alternative)."""
    lines = [f"From: {sender}", f"To: {to}"]
    if cc:
        lines.append(f"Cc: {cc}")
    lines += [f"Subject: {subject}", f"Date: {date}", "MIME-Version: 1.0"]
    if html is None:
        lines += [
            'Content-Type: text/plain; charset="utf-8"',
            "Content-Transfer-Encoding: 8bit",
            "",
            body,
        ]
    else:
        lines += [
            'Content-Type: multipart/alternative; boundary="BOUNDARY"',
            "",
            "--BOUNDARY",
            'Content-Type: text/plain; charset="utf-8"',
            "Content-Transfer-Encoding: 8bit",
            "",
            body,
            "--BOUNDARY",
            'Content-Type: text/html; charset="utf-8"',
            "Content-Transfer-Encoding: 8bit",
            "",
            html,
            "--BOUNDARY--",
        ]
    return "\r\n".join(lines).encode("utf-8")


class FakeChatClient:
    """ChatClient double: replies are consumed in order; an Exception is raised."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, messages, system_prompt="", params=None):
        self.calls.append({"messages": messages, "system_prompt": system_prompt,
                           "params": params})
        if not self.replies:
            raise AssertionError("unexpected chat call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ChatResponse(content=reply)


@pytest.fixture
def eml():
    return build_eml


@pytest.fixture
def fake_chat():
    return FakeChatClient


@pytest.fixture
def projects():
    return [
        ProjectRecord(id="p1", name="Atlas", aliases=("ATL-X",)),
        ProjectRecord(id="p2", name="Nova Launch", aliases=("NL2026", "Nova")),
        ProjectRecord(id="p3", name="Horizon Retail"),
    ]


@pytest.fixture
def stages():
    return [
        StageRecord(
            id="initial-inquiry", name="Initial Inquiry", order=1,
            sub_stages=(
                SubStageRecord(id="first-contact", name="First Contact"),
                SubStageRecord(id="needs-assessment", name="Needs Assessment"),
            ),
        ),
        StageRecord(id="proposal-discussion", name="Proposal Discussion", order=2),
        StageRecord(id="partnership-confirmed", name="Partnership Confirmed", order=3),
        StageRecord(id="after-service", name="After Service", order=4),
    ]
