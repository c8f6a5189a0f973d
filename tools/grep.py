# tools/grep.py
from __future__ import annotations

import os
import re
from typing import Any, Dict, List, NamedTuple

from loguru import logger

from errors import NotFoundError, ToolError, ToolValidationError
from tools.base import BaseTool, ToolResult
from tools.matching import is_binary_name, matches_glob, walk_tree
from tools.paths import ensure_resolved_within_root

DEFAULT_INCLUDE = "**/*"


class GrepMatch(NamedTuple):
    rel_path: str
    line_number: int
    line: str


class GrepTool(BaseTool):
    name = "grep"
    description = (
        "Searches for text patterns in files using regular expressions (case-insensitive). "
        "Can search in a specific directory and filter files with a glob include pattern."
    )
    schema = {
        "type": "object",
        "properties": {
            "pattern": {
                "type": "string",
                "description": "The regular expression pattern to search for in file contents.",
            },
            "path": {
                "type": "string",
                "description": "The directory to search in (optional, defaults to the project root).",
            },
            "include": {
                "type": "string",
                "description": "File pattern to include in the search (e.g. '*.js', '*.{ts,tsx}'). Defaults to '**/*'.",
            },
        },
        "required": ["pattern"],
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        try:
            re.compile(params["pattern"])
        except re.error as e:
            raise ToolValidationError(f"Invalid regular expression pattern: {params['pattern']} ({e})") from e
        if params.get("path"):
            self._confine(params["path"])

    def _files(self, base: str, include: str) -> List[str]:
        files = []
        for entry in walk_tree(base, root=self.root):
            if entry.is_dir or is_binary_name(entry.rel_path):
                continue
            if matches_glob(include, entry.rel_path):
                files.append(entry.path)
        return files

    @staticmethod
    def _search_file(path: str, rel: str, rx: "re.Pattern[str]") -> List[GrepMatch]:
        with open(path, "r", encoding="utf-8") as fh:
            text = fh.read()
        return [
            GrepMatch(rel, i, line.strip())
            for i, line in enumerate(text.split("\n"), 1)
            if rx.search(line)
        ]

    def run(self, params: Dict[str, Any]) -> ToolResult:
        pattern = params["pattern"]
        include = params.get("include") or DEFAULT_INCLUDE
        base = self._confine(params.get("path") or self.root)
        ensure_resolved_within_root(base, self.root, self.name)
        if not os.path.exists(base):
            raise NotFoundError(f"Failed to execute grep search: search path {base} does not exist")
        if not os.path.isdir(base):
            raise ToolError(f"Failed to execute grep search: search path {base} is not a directory")

        rx = re.compile(pattern, re.IGNORECASE)
        files = self._files(base, include)
        matches: List[GrepMatch] = []
        for path in files:
            rel = os.path.relpath(path, base).replace(os.sep, "/")
            try:
                matches.extend(self._search_file(path, rel, rx))
            except (OSError, UnicodeDecodeError) as e:
                # binary or unreadable: skip, the rest of the search goes on
                logger.debug("grep: skipping '{}': {}", rel, e)

        logger.info("grep: pattern='{}' include='{}' files={} matches={}", pattern, include, len(files), len(matches))
        if not matches:
            return ToolResult(
                llm_content=f'No matches found for pattern "{pattern}" in {len(files)} files searched in {base}'
            )

        grouped: Dict[str, List[GrepMatch]] = {}
        for m in matches:
            grouped.setdefault(m.rel_path, []).append(m)

        out = [
            f'Found {len(matches)} matches for pattern "{pattern}" in {len(grouped)} files '
            f"(searched {len(files)} files in {base}):",
            "",
        ]
        for rel, items in grouped.items():
            out.append(f"{rel}:")
            out.extend(f"  {m.line_number}: {m.line}" for m in items)
            out.append("")
        return ToolResult(llm_content="\n".join(out))
