"""Per-module loggers for the chat proxy.

Every handler step goes through log_step so a CloudWatch search for
"[STEP 5]" or for an aws_request_id shows exactly where a request stopped.
Level comes from COMPANION_LOG_LEVEL; unknown names fall back to INFO.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

_FORMAT = "[%(levelname)s] %(name)s:%(lineno)d - %(message)s"

def _level_from_env() -> int:
    name = (os.environ.get("COMPANION_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    # Lambda and pytest may attach their own handlers; do not stack ours on top.
    if logger.handlers:
        return logger

    logger.setLevel(_level_from_env())
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    return logger

def log_step(logger: logging.Logger, step: str, msg: str, request_id: Optional[str] = None):
    logger.info("[STEP %s] [%s] %s", step, request_id or "-", msg)
