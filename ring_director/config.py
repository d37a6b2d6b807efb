"""Process configuration, read from the environment (and ``.env``)."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class DirectorConfig(BaseModel):
    state_dir: Path = Path("./data/storyline")
    llm_url: str = "http://localhost:11434"
    llm_model: str = "qwen3-coder"
    llm_format: Literal["ollama", "openai"] = "ollama"
    response_delay_ms: int = 3000
    typing_delay_per_char_ms: int = 30
    max_response_length: int = 500
    promo_interval_minutes: int = 30
    api_host: str = "0.0.0.0"
    api_port: int = 9091
    log_level: str = "INFO"


_INT_FIELDS = {
    "response_delay_ms": "RESPONSE_DELAY_MS",
    "typing_delay_per_char_ms": "TYPING_DELAY_PER_CHAR",
    "max_response_length": "MAX_RESPONSE_LENGTH",
    "promo_interval_minutes": "PROMO_INTERVAL_MIN",
    "api_port": "DIRECTOR_PORT",
}

_STR_FIELDS = {
    "state_dir": "STATE_DIR",
    "llm_url": "OLLAMA_URL",
    "llm_model": "OLLAMA_MODEL",
    "api_host": "HOST",
    "log_level": "LOG_LEVEL",
}


def load_config(env: Mapping[str, str] | None = None) -> DirectorConfig:
    """Build a DirectorConfig from ``env``, or from os.environ after loading ``.env``."""
    if env is None:
        load_dotenv()
        env = os.environ

    values: dict[str, object] = {}
    for field, var in _STR_FIELDS.items():
        if env.get(var):
            values[field] = env[var]

    for field, var in _INT_FIELDS.items():
        raw = env.get(var)
        if not raw:
            continue
        try:
            values[field] = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r, not an integer", var, raw)

    fmt = (env.get("LLM_FORMAT") or "").lower()
    if fmt in ("ollama", "openai"):
        values["llm_format"] = fmt
    elif fmt:
        logger.warning("Ignoring LLM_FORMAT=%r, expected ollama or openai", fmt)

    return DirectorConfig(**values)
