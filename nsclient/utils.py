import faulthandler
import logging
import os
from datetime import datetime
from typing import Optional, TextIO


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(levelname)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if env_bool("NSCLIENT_DEBUG", False) else logging.INFO)
    return logger


def env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def env_bool(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value not in ("0", "false", "FALSE")


def http_log_path() -> str:
    return os.getenv("NSCLIENT_HTTP_LOG") or os.path.join(os.getcwd(), "nsclient_http.log")


def append_log_line(path: str, line: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    safe_line = line.rstrip("\n")
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"[{timestamp}] {safe_line}\n")


def truncate_text(text: str, limit: int = 2000) -> str:
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated {len(text) - limit} chars]"


def enable_faulthandler(path: str) -> Optional[TextIO]:
    """Dump the tracebacks of all threads to ``path`` on a hard crash.

    Returns the open log handle, which must stay open while the handler is
    enabled, or None when the file cannot be opened.
    """
    try:
        handle = open(path, "a", buffering=1, encoding="utf-8")
    except OSError as exc:
        get_logger("nsclient").info("Faulthandler enable failed: %s", exc)
        return None
    faulthandler.enable(file=handle, all_threads=True)
    append_log_line(path, "faulthandler enabled")
    get_logger("nsclient").debug("Faulthandler enabled -> %s", path)
    return handle
