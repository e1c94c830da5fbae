"""
Configuration loader – reads the project / stage registries and the
folder of .eml files, and assembles a ParsingConfig.

Registry files may be JSON or YAML (YAML is a superset of JSON, so both
go through yaml.safe_load):

    projects: [{id, name, aliases, description, status}, ...]
    stages:   [{id, name, description, keywords, order, subStages}, ...]

A missing registry file is not fatal: it logs a warning and yields an
empty list, which makes every message resolve to no_match.
"""

import logging
import os

import yaml

from partner_email_parser.constants import ALLOWED_EXTENSIONS
from partner_email_parser.exceptions import ConfigError
from partner_email_parser.models import (
    ParsingConfig,
    ProjectRecord,
    SourceMessage,
    StageRecord,
)
from partner_email_parser.settings import Settings, settings as default_settings

log = logging.getLogger(__name__)


def _load_document(path: str, key: str) -> list[dict]:
    if not path or not os.path.exists(path):
        log.warning("%s registry not found at %s – using an empty list", key, path)
        return []
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {path}: {exc}") from exc

    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        entries = data.get(key) or []
    else:
        raise ConfigError(f"{path}: expected a mapping with a '{key}' list")
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ConfigError(f"{path}: '{key}' must be a list of mappings")
    return entries


def load_projects(path: str) -> list[ProjectRecord]:
    projects = [ProjectRecord.from_dict(e) for e in _load_document(path, "projects")]
    projects = [p for p in projects if p.name]
    log.info("Loaded %d projects from %s", len(projects), path)
    return projects


def load_stages(path: str) -> list[StageRecord]:
    stages = [StageRecord.from_dict(e) for e in _load_document(path, "stages")]
    stages = sorted((s for s in stages if s.id), key=lambda s: s.order)
    log.info("Loaded %d stages from %s", len(stages), path)
    return stages


def load_email_files(directory: str, max_file_size: int, max_files: int) -> list[SourceMessage]:
    """Read every .eml file in *directory* (sorted by name).

    Files larger than *max_file_size* are skipped with a warning; more than
    *max_files* eligible files raises ConfigError.
    """
    if not os.path.isdir(directory):
        log.warning("Email folder %s does not exist", directory)
        return []

    names = sorted(
        n for n in os.listdir(directory)
        if n.lower().endswith(ALLOWED_EXTENSIONS)
        and os.path.isfile(os.path.join(directory, n))
    )
    log.info("Scanned %s: %d email files", directory, len(names))
    if len(names) > max_files:
        raise ConfigError(f"found {len(names)} email files, at most {max_files} are supported")

    messages = []
    for name in names:
        path = os.path.join(directory, name)
        size = os.path.getsize(path)
        if size > max_file_size:
            log.warning("Skipping oversized file %s (%d bytes)", name, size)
            continue
        with open(path, "rb") as f:
            messages.append(SourceMessage(filename=name, raw_content=f.read(), size_bytes=size))
    return messages


def build_parsing_config(
    cfg: Settings | None = None,
    projects_path: str | None = None,
    stages_path: str | None = None,
    enable_ai: bool | None = None,
) -> ParsingConfig:
    cfg = cfg or default_settings
    return ParsingConfig(
        enable_ai=cfg.ENABLE_AI if enable_ai is None else enable_ai,
        fuzzy_match_threshold=cfg.FUZZY_MATCH_THRESHOLD,
        ai_confidence_threshold=cfg.AI_CONFIDENCE_THRESHOLD,
        max_content_length=cfg.MAX_CONTENT_LENGTH,
        projects=tuple(load_projects(projects_path or cfg.PROJECTS_PATH)),
        stages=tuple(load_stages(stages_path or cfg.STAGES_PATH)),
        platform_domains=cfg.PLATFORM_DOMAINS,
    )
