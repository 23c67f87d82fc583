# anistream/core/logger.py
from __future__ import annotations

"""
Loguru setup for the AniStream API.

Console output is colorized text unless `LOG_JSON=1`, in which case every
record becomes one JSON object per line. Records from the stdlib loggers used
by uvicorn, starlette, SQLAlchemy and our own `anistream.*` modules are routed
into Loguru so there is a single sink configuration.

Every record carries `request_id` (bound by RequestIDMiddleware, "N/A" outside
a request).

Environment knobs:

    LOG_LEVEL     INFO | DEBUG | WARNING | ERROR   (INFO)
    LOG_JSON      1 to emit JSON lines             (0)
    APP_DEBUG     1 to enable backtrace/diagnose   (0)
    LOG_TO_FILE   1 to add a rotating file sink    (0)
    LOG_DIR       directory for the file sink      (logs)
    LOG_FILE      file name inside LOG_DIR         (anistream.log)
    LOG_ROTATION  loguru rotation rule             (10 MB)
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = _env_flag("LOG_JSON")
APP_DEBUG = _env_flag("APP_DEBUG")
LOG_TO_FILE = _env_flag("LOG_TO_FILE")
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE = os.getenv("LOG_FILE", "anistream.log")
LOG_ROTATION = os.getenv("LOG_ROTATION", "10 MB")

# stdlib loggers whose records are forwarded to Loguru
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "starlette",
    "sqlalchemy.pool",
    "anistream",
)

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "[{extra[request_id]}] "
    "<cyan>{name}:{function}:{line}</cyan> "
    "<level>{message}</level>\n{exception}"
)
_SCALARS = (str, int, float, bool, type(None))


# ─────────────────────────────────────────────────────────────
# 🧾 Record formatting
# ─────────────────────────────────────────────────────────────
def _format_text(record) -> str:
    record["extra"].setdefault("request_id", "N/A")
    return _TEXT_FORMAT


def _format_json(record) -> str:
    extra = record["extra"]
    doc: Dict[str, Any] = {
        "ts": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "where": f'{record["function"]}:{record["line"]}',
        "msg": record["message"],
        "request_id": extra.get("request_id", "N/A"),
    }
    doc.update(
        {k: (v if isinstance(v, _SCALARS) else str(v)) for k, v in extra.items() if k not in doc and k != "_json"}
    )
    extra["_json"] = json.dumps(doc, ensure_ascii=False)
    return "{extra[_json]}\n{exception}"


# ─────────────────────────────────────────────────────────────
# 🔁 stdlib → Loguru
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Forward a stdlib `LogRecord` to Loguru at the matching level."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _route_stdlib(level: str) -> None:
    handler = InterceptHandler()
    for name in INTERCEPTED_LOGGERS:
        std = logging.getLogger(name)
        std.handlers = [handler]
        std.setLevel(level)
        std.propagate = False


def setup_logging(level: str | None = None) -> None:
    """Install sinks from the environment; calling it again replaces them."""
    level = (level or LOG_LEVEL).upper()
    formatter = _format_json if LOG_JSON else _format_text

    logger.remove()
    logger.configure(extra={"request_id": "N/A"})
    logger.add(sys.stdout, level=level, format=formatter, backtrace=APP_DEBUG, diagnose=APP_DEBUG)

    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / LOG_FILE,
            level=level,
            format=formatter,
            rotation=LOG_ROTATION,
            enqueue=True,
        )

    _route_stdlib(level)


setup_logging()

__all__ = ["logger", "setup_logging", "InterceptHandler"]
