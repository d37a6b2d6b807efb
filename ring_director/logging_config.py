"""Logging setup for the director process.

Call setup_logging() once at startup (main.py). Every module then gets its
own logger via ``logging.getLogger(__name__)``.

Level mapping:
  DEBUG   - per-round match detail, LLM call sizes
  INFO    - state loaded, surprise entrances, events started/completed
  WARNING - absorbed failures: LLM errors, background write failures
  ERROR   - corrupt state on load
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(name)s] %(message)s",
        stream=sys.stdout,
        force=True,
    )
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
