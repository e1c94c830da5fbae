"""
Partner email parser – command-line entry point.

Steps:
  1) Load env / settings / project + stage registries
  2) Read the .eml files from the email folder
  3) Run the batch pipeline (optionally with AI enrichment)
  4) Write CSV and/or JSON output and print a run summary

Exit codes: 0 when the batch completed (even with per-file failures),
2 when the configuration is invalid.
"""

import argparse
import json
import logging
import os
import sys

from partner_email_parser.ai_enrichment import EnrichmentAdapter
from partner_email_parser.batch import parse_emails
from partner_email_parser.config import build_parsing_config, load_email_files
from partner_email_parser.exceptions import ConfigError
from partner_email_parser.llm_client import OpenAIChatClient
from partner_email_parser.settings import Settings
from partner_email_parser.utils import load_env, safe_print, setup_logging
from partner_email_parser.writers.csv_writer import CSVWriter

log = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract project, partner and communication stage from .eml files"
    )
    parser.add_argument("--emails", type=str, default=None, help="Folder of .eml files")
    parser.add_argument("--projects", type=str, default=None, help="Project registry (JSON/YAML)")
    parser.add_argument("--stages", type=str, default=None, help="Stage registry (JSON/YAML)")
    parser.add_argument("--ai", dest="enable_ai", action="store_true", default=None,
                        help="Enable AI enrichment (overrides EMAIL_PARSER_ENABLE_AI)")
    parser.add_argument("--no-ai", dest="enable_ai", action="store_false",
                        help="Disable AI enrichment")
    parser.add_argument("--csv", type=str, default=None, metavar="PATH", help="Write results as CSV")
    parser.add_argument("--json", type=str, default=None, metavar="PATH",
                        help="Write the full batch result as JSON")
    parser.add_argument("--log-file", type=str, default=None, help="Also log (DEBUG) to this file")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    return parser


def _print_summary(batch) -> None:
    s = batch.summary
    safe_print(f"\n{'='*60}")
    safe_print("  PARSE COMPLETE")
    safe_print(f"{'='*60}")
    safe_print(f"  total={s.total}  successful={s.successful}  failed={s.failed}  "
               f"avg_confidence={s.average_confidence:.2f}  time={s.processing_time_ms}ms")
    for r in batch.results:
        status = "OK  " if r.success else "FAIL"
        safe_print(f"  [{status}] {r.filename}: project={r.project_name or '-'}  "
                   f"partner={r.partner_name or '-'} <{r.partner_email or '-'}>  "
                   f"stage={r.communication_stage or '-'}")
        if not r.success and r.error_reason:
            safe_print(f"         reason: {r.error_reason}")
    if batch.errors:
        safe_print("\n  Errors:")
        for err in batch.errors:
            safe_print(f"    - {err}")
    safe_print(f"{'='*60}")


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)
    load_env()
    cfg = Settings()

    try:
        config = build_parsing_config(
            cfg,
            projects_path=args.projects,
            stages_path=args.stages,
            enable_ai=args.enable_ai,
        )
        files = load_email_files(
            args.emails or cfg.EMAILS_DIR,
            max_file_size=cfg.MAX_FILE_SIZE,
            max_files=cfg.MAX_FILES_COUNT,
        )
    except ConfigError as exc:
        log.error("Invalid configuration: %s", exc)
        safe_print(f"ERROR: {exc}")
        return 2

    adapter = None
    if config.enable_ai:
        if not cfg.LLM_API_KEY:
            log.warning("AI enrichment requested but LLM_API_KEY is not set")
        adapter = EnrichmentAdapter(OpenAIChatClient.from_settings(cfg))

    batch = parse_emails(files, config, adapter=adapter)

    if args.csv:
        CSVWriter(args.csv).write(batch.results)
    if args.json:
        os.makedirs(os.path.dirname(os.path.abspath(args.json)), exist_ok=True)
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(batch.to_dict(), f, ensure_ascii=False, indent=2)
        log.info("Wrote JSON result to %s", args.json)

    _print_summary(batch)
    return 0


if __name__ == "__main__":
    sys.exit(main())
