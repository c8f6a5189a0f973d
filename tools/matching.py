# tools/matching.py: glob→regex translation and the shared tree walker for glob/grep
from __future__ import annotations

import os
import re
import stat
from functools import lru_cache
from typing import Iterator, List, NamedTuple, Optional

from loguru import logger

from tools.paths import is_within_root

IGNORED_DIRS = frozenset({"node_modules", ".git", ".hg", ".svn", "__pycache__"})

BINARY_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".ico",
    ".pdf", ".zip", ".tar", ".gz",
})


def _split_alternatives(body: str) -> List[str]:
    parts, depth, cur = [], 0, []
    for ch in body:
        if ch == "," and depth == 0:
            parts.append("".join(cur))
            cur = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        cur.append(ch)
    parts.append("".join(cur))
    return parts


def _find_closing_brace(pattern: str, start: int) -> int:
    depth = 0
    for j in range(start, len(pattern)):
        if pattern[j] == "{":
            depth += 1
        elif pattern[j] == "}":
            depth -= 1
            if depth == 0:
                return j
    return -1


def _translate(pattern: str) -> str:
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    # "**/" also matches zero directories
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            first = i + 2 if pattern[i + 1:i + 2] in ("!", "^") else i + 1
            end = pattern.find("]", first + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1:end]
                if body[:1] in ("!", "^"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = end
        elif ch == "{":
            end = _find_closing_brace(pattern, i)
            if end == -1:
                out.append(re.escape(ch))
            else:
                alts = _split_alternatives(pattern[i + 1:end])
                out.append("(?:" + "|".join(_translate(a) for a in alts) + ")")
                i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> "re.Pattern[str]":
    """
    Compile a glob into a case-insensitive, fully anchored regex.
    Supports **, *, ?, [a-z], [!x] and {a,b} alternation. Paths use '/'.
    """
    return re.compile(_translate(pattern.replace("\\", "/")), re.IGNORECASE)


def matches_glob(pattern: str, rel_path: str) -> bool:
    """Match against the relative path and against the bare file name."""
    rx = glob_to_regex(pattern)
    rel = rel_path.replace(os.sep, "/")
    return bool(rx.fullmatch(rel) or rx.fullmatch(rel.rsplit("/", 1)[-1]))


def is_ignored_dir(name: str) -> bool:
    return name in IGNORED_DIRS or name.startswith(".")


def is_binary_name(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in BINARY_EXTENSIONS


class TreeEntry(NamedTuple):
    path: str
    rel_path: str
    is_dir: bool
    size: int
    mtime: float


def walk_tree(base: str, root: Optional[str] = None) -> Iterator[TreeEntry]:
    """
    Depth-first walk below `base` (base itself excluded).
    Skips IGNORED_DIRS and dot-directories; unreadable directories are skipped.
    Symlinked directories are not descended into, and when `root` is given
    symlinks resolving outside it are dropped.
    """
    stack = [base]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("walk_tree: skipping unreadable '{}': {}", current, e)
            continue
        subdirs = []
        for entry in entries:
            try:
                real_dir = entry.is_dir(follow_symlinks=False)
                if entry.is_symlink() and root is not None and not is_within_root(os.path.realpath(entry.path), os.path.realpath(root)):
                    logger.debug("walk_tree: symlink '{}' leaves the root, skipped", entry.path)
                    continue
                st = entry.stat()
                is_dir = stat.S_ISDIR(st.st_mode)
            except OSError as e:
                logger.debug("walk_tree: cannot stat '{}': {}", entry.path, e)
                continue
            if is_dir and is_ignored_dir(entry.name):
                continue
            rel = os.path.relpath(entry.path, base)
            yield TreeEntry(entry.path, rel, is_dir, 0 if is_dir else st.st_size, st.st_mtime)
            if real_dir:
                subdirs.append(entry.path)
        stack.extend(reversed(subdirs))


def human_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            break
    return f"{value:.1f} {unit}"
