"""
Shared constants for the partner email parser.

Confidence levels, match-type labels, platform domains and the regex
patterns used by the deterministic extractors.
"""

import re

# ---- Confidence levels ----
CONFIDENCE_LOW = 0.3
CONFIDENCE_MEDIUM = 0.6
CONFIDENCE_HIGH = 0.8
CONFIDENCE_VERY_HIGH = 0.95

# ---- Resolver methods ----
METHOD_EXACT = "exact_match"
METHOD_ALIAS = "alias_match"
METHOD_FUZZY = "fuzzy_match"
METHOD_NONE = "no_match"

# ---- Result match types ----
MATCH_EXACT = "exact"
MATCH_FUZZY = "fuzzy"
MATCH_AI = "ai_extracted"
MATCH_TYPES = (MATCH_EXACT, MATCH_FUZZY, MATCH_AI)

# ---- Error-reason fragments ----
REASON_NO_PROJECT = "project name not recognized"
REASON_NO_EMAIL = "partner email not found"
REASON_LOW_CONFIDENCE = "confidence too low"

# Domains that belong to the operating organisation (platform staff)
DEFAULT_PLATFORM_DOMAINS = (
    "bluefocus.com",
    "bluefocusmedia.com",
)

# ---- Parser defaults ----
MAX_FILE_SIZE = 10 * 1024 * 1024   # 10 MB
MAX_FILES_COUNT = 50
FUZZY_MATCH_THRESHOLD = 0.6
AI_CONFIDENCE_THRESHOLD = 0.5
MAX_CONTENT_LENGTH = 5000
ALLOWED_EXTENSIONS = (".eml",)

# Fuzzy search tuning
FUZZY_QUERY_CHARS = 500
FUZZY_ACCEPT_SCORE = 0.5
FUZZY_NAME_WEIGHT = 0.7
FUZZY_ALIAS_WEIGHT = 0.3
FUZZY_MIN_MATCH_CHARS = 2

NO_SUBJECT = "(no subject)"
FAILED_SUBJECT = "(parse failed)"
ATTACHMENT_PLACEHOLDER = "[attachment data]"

# ---- Regex patterns ----
EMAIL_RE = re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")

# Salutation / signature patterns, tried in order
NAME_PATTERNS = [
    re.compile(r"Best\s+regards?,?\s*([^<\n]+)", re.IGNORECASE),
    re.compile(r"谢谢.?([^<\n]+)"),
    re.compile(r"此致.?([^<\n]+)"),
    re.compile(r"Hi\s+([^,\n]+)", re.IGNORECASE),
    re.compile(r"Dear\s+([^,\n]+)", re.IGNORECASE),
    re.compile(r"Hello\s+([^,\n]+)", re.IGNORECASE),
]

# Generic mailbox terms that are never a person or company name
INVALID_NAME_PATTERNS = [
    re.compile(r"team", re.IGNORECASE),
    re.compile(r"support", re.IGNORECASE),
    re.compile(r"noreply", re.IGNORECASE),
    re.compile(r"admin", re.IGNORECASE),
    re.compile(r"info@", re.IGNORECASE),
]
