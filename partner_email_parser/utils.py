"""
Utility functions: logging setup, .env loading and console printing.
"""

import logging
import os
import sys

from dotenv import load_dotenv

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Console logging at *level*; everything (DEBUG+) also goes to *log_file*."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(ch)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(fh)

    # Quiet the HTTP stack underneath the openai SDK
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def load_env(env_path: str | None = None) -> dict:
    """Load .env (default: current directory) and return os.environ as a dict."""
    load_dotenv(env_path)
    return dict(os.environ)


def safe_print(*args, **kwargs):
    """Print that won't crash on encoding errors (CJK names, emoji, etc.)."""
    try:
        print(*args, **kwargs)
    except UnicodeEncodeError:
        text = " ".join(str(a) for a in args)
        print(text.encode("utf-8", errors="replace").decode("ascii", errors="replace"))
