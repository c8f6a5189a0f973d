# logging_setup.py
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, Union
from loguru import logger

_SINK_IDS: list[int] = []
_LAST_CFG = {
    "console": True,
    "console_level": None,   # None → same as the file level
    "log_file": None,
    "rotation": "5 MB",
    "retention": 10,         # keep last 10 files
    "enqueue": False,
}
_DEFAULT_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "{level:<7} | "
    "{name}:{line} | "
    "{message}"
)
_CONSOLE_FMT = "<level>{level:<7}</level> | {message}"

_VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def _resolve_level(level: Optional[str]) -> str:
    """Explicit arg, else env WSCODE_LOG_LEVEL, else INFO."""
    val = (level or os.getenv("WSCODE_LOG_LEVEL") or "INFO").strip().upper()
    val = _ALIASES.get(val, val)
    return val if val in _VALID_LEVELS else "INFO"


def _coerce_log_file(path_like: Optional[Union[str, Path]]) -> str:
    """None → <app home>/logs/wscode.log; a directory gets 'wscode.log' inside."""
    if path_like is None:
        from config_home import app_dir
        log_path = app_dir() / "logs" / "wscode.log"
    else:
        log_path = Path(path_like)
        if log_path.suffix == "":
            log_path = log_path / "wscode.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return str(log_path)


def _reconfigure(level: str) -> None:
    global _SINK_IDS
    for sid in _SINK_IDS:
        logger.remove(sid)
    _SINK_IDS = []

    if _LAST_CFG["console"]:
        _SINK_IDS.append(
            logger.add(
                sys.stderr,
                level=_resolve_level(_LAST_CFG["console_level"] or level),
                format=_CONSOLE_FMT,
                enqueue=_LAST_CFG["enqueue"],
            )
        )

    if _LAST_CFG["log_file"] is not False:
        _SINK_IDS.append(
            logger.add(
                _coerce_log_file(_LAST_CFG["log_file"]),
                level=level,
                format=_DEFAULT_FMT,
                rotation=_LAST_CFG["rotation"],
                retention=_LAST_CFG["retention"],
                encoding="utf-8",
                enqueue=_LAST_CFG["enqueue"],
            )
        )


def configure_logging(
    level: Optional[str] = None,
    *,
    console: bool = True,
    console_level: Optional[str] = None,
    log_file: Optional[Union[str, Path, bool]] = None,
    rotation: str = "5 MB",
    retention: Union[int, str] = 10,
    enqueue: bool = False,
) -> None:
    """
    Configure Loguru once at CLI start-up.

    Args:
        level: file sink level (env fallback: WSCODE_LOG_LEVEL)
        console: also log to stderr
        console_level: stderr level; the REPL keeps this at WARNING so logs don't
            interleave with answers
        log_file: file path, directory, None for the app-home default, False to disable
        rotation/retention: Loguru rotation policy and kept files
    """
    global _SINK_IDS
    # drop loguru's default stderr handler so we own every sink
    logger.remove()
    _SINK_IDS = []
    _LAST_CFG.update(
        console=console,
        console_level=console_level,
        log_file=log_file,
        rotation=rotation,
        retention=retention,
        enqueue=enqueue,
    )
    _reconfigure(_resolve_level(level))

