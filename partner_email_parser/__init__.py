"""Partner email parser – project / partner / stage extraction from .eml files."""

from partner_email_parser.batch import parse_emails, parse_single_email
from partner_email_parser.exceptions import (
    ChatError,
    ConfigError,
    EmailParserError,
    MessageDecodeError,
)
from partner_email_parser.models import (
    BatchResult,
    BatchSummary,
    ParsingConfig,
    ParsingResult,
    ProjectRecord,
    SourceMessage,
    StageRecord,
    SubStageRecord,
)

__all__ = [
    "parse_emails",
    "parse_single_email",
    "BatchResult",
    "BatchSummary",
    "ParsingConfig",
    "ParsingResult",
    "ProjectRecord",
    "SourceMessage",
    "StageRecord",
    "SubStageRecord",
    "EmailParserError",
    "ConfigError",
    "MessageDecodeError",
    "ChatError",
]
