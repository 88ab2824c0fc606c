"""
Utility functions for text processing, number parsing, and logging.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional


def init_logger(
    name: str = "aptscout",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "aptscout.log"
) -> logging.Logger:
    """Initialize logger with console and optional file handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:  # Create file handler only if log_file is provided
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def clean_text(s: Optional[str]) -> str:
    """Clean and normalize text by removing extra whitespace."""
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def truncate(s: str, limit: int) -> str:
    """Collapse whitespace and cut the text to at most `limit` characters."""
    return clean_text(s)[:limit].strip()


def parse_number(text: str) -> Optional[float]:
    """
    Parse a German or English formatted number.

    A separator followed by exactly three digits is a thousands separator,
    anything else is the decimal separator:

        "450,50" -> 450.5    "1.250" -> 1250.0    "1.250,00" -> 1250.0
    """
    if not text:
        return None

    s = re.sub(r"[\s\u00a0\u202f]", "", text)
    m = re.fullmatch(r"(\d{1,3}(?:[.,]\d{3})+|\d+)(?:[.,](\d{1,2}))?", s)
    if not m:
        return None

    whole = re.sub(r"[.,]", "", m.group(1))
    frac = m.group(2)
    try:
        return float(f"{whole}.{frac}") if frac else float(whole)
    except ValueError:
        return None


def format_number(value: float) -> str:
    """Format a parsed number for display: 350.0 -> "350", 450.5 -> "450.50"."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
