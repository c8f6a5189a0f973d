# logging_decorators.py
from __future__ import annotations
import time, functools
from typing import Any, Callable, Dict, Iterable
from loguru import logger

_REDACT_DEFAULT = {"api_key", "authorization", "password", "token", "secret"}
# tool params whose values are file bodies; log their size, not their text
_BULKY_KEYS = {"old_content", "new_content", "content"}


def _redact(obj: Any, redact_keys: set[str], max_len: int, max_items: int) -> Any:
    """Redaction + truncation so tool arguments stay readable in logs."""
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            key = str(k).lower()
            if key in redact_keys:
                out[k] = "******"
            elif key in _BULKY_KEYS and isinstance(v, str):
                out[k] = f"<{len(v)} chars>"
            else:
                out[k] = _redact(v, redact_keys, max_len, max_items)
        return out
    if isinstance(obj, (list, tuple)):
        seq = list(obj)
        cut = min(len(seq), max_items)
        trimmed = [_redact(x, redact_keys, max_len, max_items) for x in seq[:cut]]
        if len(seq) > cut:
            trimmed.append(f"... (+{len(seq) - cut} more)")
        return trimmed
    if isinstance(obj, str) and len(obj) > max_len:
        return obj[:max_len] + f"...(+{len(obj) - max_len} chars)"
    return obj


def _default_summary(ret: Any) -> Dict[str, Any]:
    content = getattr(ret, "llm_content", None)
    if isinstance(content, str):
        return {"chars": len(content), "lines": content.count("\n") + 1}
    if isinstance(ret, (list, dict, str)):
        return {"len": len(ret)}
    return {"type": type(ret).__name__}


def log_call(
    name: str | None = None,
    *,
    level: str = "INFO",
    slow_ms: int = 1000,               # warn if slower than this
    redact: Iterable[str] = _REDACT_DEFAULT,
    arg_max_len: int = 200,
    arg_max_items: int = 20,
    summarize: Callable[[Any], Dict[str, Any]] | None = None,
):
    """
    Decorator that logs entry (with redacted args), exit (duration + summary)
    and failures of the wrapped callable. Exceptions are re-raised untouched.
    """
    redact_keys = {str(k).lower() for k in redact}
    summary_fn = summarize or _default_summary

    def decorator(fn: Callable):
        if getattr(fn, "__logged__", False):
            return fn

        qual = name or getattr(fn, "__qualname__", None) or fn.__name__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            shown = _redact(list(args) + ([kwargs] if kwargs else []), redact_keys, arg_max_len, arg_max_items)
            lg = logger.opt(depth=1)
            lg.log(level, "→ {} args={}", qual, shown)

            t0 = time.perf_counter()
            try:
                ret = fn(*args, **kwargs)
            except Exception as e:
                dur_ms = (time.perf_counter() - t0) * 1000.0
                lg.warning("✗ {} failed in {:.0f}ms: {}: {}", qual, dur_ms, type(e).__name__, e)
                raise
            dur_ms = (time.perf_counter() - t0) * 1000.0
            summary = summary_fn(ret)
            if dur_ms >= slow_ms:
                lg.warning("✓ {} done in {:.0f}ms (SLOW) summary={}", qual, dur_ms, summary)
            else:
                lg.log(level, "✓ {} done in {:.0f}ms summary={}", qual, dur_ms, summary)
            return ret

        wrapper.__logged__ = True
        return wrapper
    return decorator
