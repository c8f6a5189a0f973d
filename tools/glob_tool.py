# tools/glob_tool.py
from __future__ import annotations

import os
from typing import Any, Dict, List

from loguru import logger

from errors import NotFoundError, ToolError, ToolValidationError
from tools.base import BaseTool, ToolResult
from tools.matching import TreeEntry, human_size, matches_glob, walk_tree
from tools.paths import ensure_resolved_within_root


class GlobTool(BaseTool):
    name = "glob"
    description = (
        "Finds files and directories matching glob patterns (e.g. `src/**/*.ts`, `**/*.md`, `*.{js,ts}`), "
        "case-insensitively, sorted by path. Ideal for locating files by name or path structure."
    )
    schema = {
        "type": "object",
        "properties": {
            "pattern": {
                "type": "string",
                "description": "The glob pattern to match against (e.g. '*.js', '**/*.ts', 'src/**/test*.js').",
            },
            "path": {
                "type": "string",
                "description": "Optional: the directory to search within. If omitted, searches the project root.",
            },
        },
        "required": ["pattern"],
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        if not params["pattern"].strip():
            raise ToolValidationError("Pattern cannot be empty")
        if params.get("path"):
            self._confine(params["path"])

    def _collect(self, base: str, pattern: str) -> List[TreeEntry]:
        if "**" in pattern:
            candidates = walk_tree(base, root=self.root)
        else:
            candidates = []
            try:
                with os.scandir(base) as it:
                    for entry in it:
                        try:
                            st = entry.stat()
                        except OSError:
                            continue
                        is_dir = entry.is_dir()
                        candidates.append(TreeEntry(entry.path, entry.name, is_dir, 0 if is_dir else st.st_size, st.st_mtime))
            except OSError as e:
                raise ToolError(f"Failed to execute glob search: cannot read directory {base} ({e})") from e
        return sorted((c for c in candidates if matches_glob(pattern, c.rel_path)), key=lambda c: c.path)

    def run(self, params: Dict[str, Any]) -> ToolResult:
        pattern = params["pattern"]
        base = self._confine(params.get("path") or self.root)
        ensure_resolved_within_root(base, self.root, self.name)
        if not os.path.exists(base):
            raise NotFoundError(f"Failed to execute glob search: search path {base} does not exist")
        if not os.path.isdir(base):
            raise ToolError(f"Failed to execute glob search: search path {base} is not a directory")

        matches = self._collect(base, pattern)
        logger.info("glob: pattern='{}' base='{}' → {} match(es)", pattern, base, len(matches))
        if not matches:
            return ToolResult(llm_content=f'No files found matching pattern "{pattern}" in {base}')

        n_dirs = sum(1 for m in matches if m.is_dir)
        lines = [
            f'Found {len(matches)} matches for pattern "{pattern}" in {base}:',
            f"({len(matches) - n_dirs} files, {n_dirs} directories)",
            "",
        ]
        for m in matches:
            rel = m.rel_path.replace(os.sep, "/")
            if m.is_dir:
                lines.append(f"[DIR] {rel}")
            else:
                lines.append(f"[FILE] {rel} ({human_size(m.size)})")
        return ToolResult(llm_content="\n".join(lines) + "\n")
