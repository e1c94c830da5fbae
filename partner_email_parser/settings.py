"""Load runtime settings from environment and .env files."""
from dataclasses import dataclass, field
import os

from dotenv import load_dotenv

from partner_email_parser.constants import (
    AI_CONFIDENCE_THRESHOLD,
    DEFAULT_PLATFORM_DOMAINS,
    FUZZY_MATCH_THRESHOLD,
    MAX_CONTENT_LENGTH,
    MAX_FILE_SIZE,
    MAX_FILES_COUNT,
)

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(p.strip().lower() for p in raw.split(",") if p.strip())


@dataclass
class Settings:
    # LLM
    ENABLE_AI: bool = field(default_factory=lambda: _env_bool("EMAIL_PARSER_ENABLE_AI", "false"))
    LLM_API_KEY: str = field(default_factory=lambda: (
        os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY") or os.getenv("DEEPSEEK_API_KEY") or ""
    ))
    LLM_BASE_URL: str = field(default_factory=lambda: os.getenv("LLM_BASE_URL", ""))
    LLM_MODEL: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    LLM_TEMPERATURE: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    LLM_MAX_TOKENS: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "400")))

    # Matching
    PLATFORM_DOMAINS: tuple[str, ...] = field(
        default_factory=lambda: _env_list("PLATFORM_DOMAINS", DEFAULT_PLATFORM_DOMAINS))
    FUZZY_MATCH_THRESHOLD: float = field(
        default_factory=lambda: float(os.getenv("FUZZY_MATCH_THRESHOLD", str(FUZZY_MATCH_THRESHOLD))))
    AI_CONFIDENCE_THRESHOLD: float = field(
        default_factory=lambda: float(os.getenv("AI_CONFIDENCE_THRESHOLD", str(AI_CONFIDENCE_THRESHOLD))))
    MAX_CONTENT_LENGTH: int = field(
        default_factory=lambda: int(os.getenv("MAX_CONTENT_LENGTH", str(MAX_CONTENT_LENGTH))))

    # Input files
    MAX_FILE_SIZE: int = field(default_factory=lambda: int(os.getenv("MAX_FILE_SIZE", str(MAX_FILE_SIZE))))
    MAX_FILES_COUNT: int = field(default_factory=lambda: int(os.getenv("MAX_FILES_COUNT", str(MAX_FILES_COUNT))))
    PROJECTS_PATH: str = field(default_factory=lambda: os.getenv("PROJECTS_PATH", "config/projects.yml"))
    STAGES_PATH: str = field(default_factory=lambda: os.getenv("STAGES_PATH", "config/stages.yml"))
    EMAILS_DIR: str = field(default_factory=lambda: os.getenv("EMAILS_DIR", "test-emails"))


settings = Settings()
