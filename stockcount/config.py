from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import streamlit as st

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "STOCKCOUNT_DATA_DIR"
ENV_AI_MODEL = "STOCKCOUNT_AI_MODEL"
ENV_AI_TIMEOUT = "STOCKCOUNT_AI_TIMEOUT"
ENV_LOG_LEVEL = "STOCKCOUNT_LOG_LEVEL"
ENV_OPENAI_KEY = "OPENAI_API_KEY"

SESSION_DATA_DIR = "stockcount_data_dir"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    openai_api_key: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    ai_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    page_size: int = 10

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _default_data_dir() -> Path:
    return Path.home() / ".stockcount"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable %s: %s", cfg, e)
            return {}
    return {}


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("%s=%r is not a number, using %s", key, raw, default)
        return default


def persist_data_dir(data_dir_str: str, default_dir: Optional[Path] = None) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    # Saved where the next start looks for it
    default_dir = default_dir or _default_data_dir()
    default_dir.mkdir(parents=True, exist_ok=True)
    cfg = default_dir / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def resolve_settings(
    session_data_dir: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    default_dir: Optional[Path] = None,
) -> Settings:
    # Priority order for the data directory:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    env = os.environ if env is None else env
    default_dir = default_dir or _default_data_dir()

    if session_data_dir:
        data_dir = Path(session_data_dir).expanduser().resolve()
    elif env.get(ENV_DATA_DIR):
        data_dir = Path(env[ENV_DATA_DIR]).expanduser().resolve()
    else:
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)

    log_level = str(env.get(ENV_LOG_LEVEL) or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "stockcount.db",
        openai_api_key=env.get(ENV_OPENAI_KEY) or None,
        ai_model=env.get(ENV_AI_MODEL) or "gpt-4o-mini",
        ai_timeout_seconds=_float_env(env, ENV_AI_TIMEOUT, 20.0),
        log_level=log_level,
    )


@st.cache_resource
def _cached_settings(session_data_dir: Optional[str]) -> Settings:
    return resolve_settings(session_data_dir)


def get_settings() -> Settings:
    return _cached_settings(st.session_state.get(SESSION_DATA_DIR))
