"""Unit tests for counterparty (partner email / name) extraction."""
from __future__ import annotations

from partner_email_parser.counterparty import (
    extract_counterparty,
    extract_name_from_content,
    is_platform_address,
    is_valid_name,
)
from partner_email_parser.models import Address, DecodedMessage

PLATFORM = ("bluefocus.com", "bluefocusmedia.com")


def _msg(sender, to=(), cc=()):
    return DecodedMessage(subject="s", sender=sender, to=tuple(to), cc=tuple(cc))


class TestPlatformDomain:

    def test_exact_domain(self):
        assert is_platform_address("ops@bluefocus.com", PLATFORM)

    def test_subdomain(self):
        assert is_platform_address("ops@mail.bluefocus.com", PLATFORM)

    def test_lookalike_domain_is_external(self):
        assert not is_platform_address("ops@notbluefocus.com", PLATFORM)

    def test_empty(self):
        assert not is_platform_address(None, PLATFORM)
        assert not is_platform_address("no-at-sign", PLATFORM)


class TestHeaderCounterparty:

    def test_external_sender_is_counterparty(self):
        info = extract_counterparty(
            _msg(Address("partner@external.com", "Jane Doe"),
                 to=[Address("ops@bluefocus.com")]),
            "", PLATFORM,
        )
        assert info.email == "partner@external.com"
        assert info.name == "Jane Doe"

    def test_platform_sender_uses_first_external_recipient(self):
        info = extract_counterparty(
            _msg(Address("ops@bluefocus.com", "Ops"),
                 to=[Address("lead@bluefocusmedia.com"), Address("bob@partner.io", "Bob Lee")]),
            "", PLATFORM,
        )
        assert info.email == "bob@partner.io"
        assert info.name == "Bob Lee"

    def test_cc_searched_after_to(self):
        info = extract_counterparty(
            _msg(Address("ops@bluefocus.com"),
                 to=[Address("lead@bluefocus.com")],
                 cc=[Address("carol@partner.io")]),
            "", PLATFORM,
        )
        assert info.email == "carol@partner.io"

    def test_all_internal_falls_back_to_body(self):
        info = extract_counterparty(
            _msg(Address("ops@bluefocus.com"), to=[Address("lead@bluefocus.com")]),
            "Loop in ops@bluefocus.com and dana@brand.co please", PLATFORM,
        )
        assert info.email == "dana@brand.co"

    def test_no_sender_uses_body(self):
        info = extract_counterparty(_msg(None), "Contact: Sales@Brand.co", PLATFORM)
        assert info.email == "sales@brand.co"

    def test_nothing_found(self):
        info = extract_counterparty(_msg(None), "no address here", PLATFORM)
        assert info.email is None
        assert info.name is None


class TestBodyName:

    def test_signature(self):
        assert extract_name_from_content("Thanks for the deck. Best regards, Jane Doe") == "Jane Doe"

    def test_greeting(self):
        assert extract_name_from_content("Hi Tom, the samples shipped today.") == "Tom"

    def test_chinese_signature(self):
        assert extract_name_from_content("请查收附件。谢谢 王经理") == "王经理"

    def test_generic_mailbox_rejected(self):
        assert extract_name_from_content("Dear Support Team, please advise.") is None

    def test_header_name_kept_over_body(self):
        info = extract_counterparty(
            _msg(Address("partner@external.com", "Jane Doe")),
            "Hi Tom, see attached.", PLATFORM,
        )
        assert info.name == "Jane Doe"

    def test_body_name_when_header_has_none(self):
        info = extract_counterparty(
            _msg(Address("partner@external.com")),
            "Hi Tom, see attached.", PLATFORM,
        )
        assert info.name == "Tom"


class TestIsValidName:

    def test_valid(self):
        assert is_valid_name("Jane Doe")
        assert is_valid_name("王经理")

    def test_invalid(self):
        assert not is_valid_name("J")
        assert not is_valid_name("x" * 101)
        assert not is_valid_name("jane@x.com")
        assert not is_valid_name("http://example.com")
        assert not is_valid_name("12345")
        assert not is_valid_name("!!")
        assert not is_valid_name("noreply bot")
