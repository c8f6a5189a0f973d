# tools/paths.py
from __future__ import annotations

import os
from typing import Union

from errors import ConfinementError

PathLike = Union[str, "os.PathLike[str]"]


def normalize(path: PathLike, base: PathLike | None = None) -> str:
    """Absolute, `.`/`..`-free path. Purely lexical: never touches the filesystem."""
    p = os.fspath(path)
    if base is not None and not os.path.isabs(p):
        p = os.path.join(os.fspath(base), p)
    return os.path.normpath(os.path.abspath(p))


def is_within_root(candidate: PathLike, root: PathLike) -> bool:
    """
    True iff `candidate` is `root` itself or nested under it.
    Prefix comparison on separator-terminated normalized paths, so
    /home/user2 is NOT inside /home/user.
    """
    cand = normalize(candidate)
    base = normalize(root)
    if cand == base:
        return True
    prefix = base if base.endswith(os.sep) else base + os.sep
    return cand.startswith(prefix)


def ensure_within_root(candidate: PathLike, root: PathLike, operation: str = "") -> str:
    """Return the normalized path or raise ConfinementError."""
    if not is_within_root(candidate, root):
        raise ConfinementError(os.fspath(candidate), normalize(root), operation)
    return normalize(candidate)


def ensure_resolved_within_root(candidate: PathLike, root: PathLike, operation: str = "") -> str:
    """Same check after following symlinks; used right before I/O."""
    real = os.path.realpath(os.fspath(candidate))
    if not is_within_root(real, os.path.realpath(os.fspath(root))):
        raise ConfinementError(os.fspath(candidate), normalize(root), operation)
    return real
