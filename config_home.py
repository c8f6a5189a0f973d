# config_home.py: wscode home directory and persisted settings
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv
from loguru import logger

DEFAULT_SETTINGS: Dict[str, Any] = {
    "model": None,        # name from models.json; None → its default
    "max_rounds": None,   # None → no cap on LLM calls per prompt
    "log_level": "INFO",
}


def app_dir() -> Path:
    """~/.wscode, or $WSCODE_HOME. Created on first use."""
    env = os.getenv("WSCODE_HOME", "").strip()
    base = Path(os.path.expanduser(env)) if env else (Path.home() / ".wscode")
    base.mkdir(parents=True, exist_ok=True)
    return base


def env_path() -> Path:
    return app_dir() / ".env"


def models_json_path() -> Path:
    return app_dir() / "models.json"


def settings_path() -> Path:
    return app_dir() / "settings.json"


def _read_json(p: Path) -> dict:
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed json '{}': {}", str(p), e)
        return {}
    return data if isinstance(data, dict) else {}


def load_environment() -> None:
    """Load ./.env first, then the app-home .env; already-set variables win."""
    load_dotenv(find_dotenv(usecwd=True))
    home_env = env_path()
    if home_env.exists():
        load_dotenv(home_env)
        logger.debug("Loaded env file '{}'", str(home_env))


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    p = path or settings_path()
    raw = _read_json(p)
    unknown = sorted(set(raw) - set(DEFAULT_SETTINGS))
    if unknown:
        logger.warning("settings.json: ignoring unknown key(s) {}", unknown)
    settings = {**DEFAULT_SETTINGS, **{k: v for k, v in raw.items() if k in DEFAULT_SETTINGS}}

    mr = settings["max_rounds"]
    if mr is not None and (isinstance(mr, bool) or not isinstance(mr, int) or mr < 1):
        logger.warning("settings.json: max_rounds must be a positive integer (got {!r}); ignoring", mr)
        settings["max_rounds"] = None
    return settings


__all__ = [
    "DEFAULT_SETTINGS",
    "app_dir",
    "env_path",
    "models_json_path",
    "settings_path",
    "load_environment",
    "load_settings",
]
