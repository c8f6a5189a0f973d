# tools/ls.py
from __future__ import annotations

import os
from typing import Any, Dict

from loguru import logger

from errors import NotFoundError, ToolError, ToolValidationError
from tools.base import BaseTool, ToolResult
from tools.paths import ensure_resolved_within_root


class LsTool(BaseTool):
    name = "list_directory"
    description = (
        "Lists the names of files and subdirectories directly within a specified directory path. "
        "Subdirectories are prefixed with [DIR]."
    )
    schema = {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "The absolute path to the directory to list. Must be inside the project root.",
            },
        },
        "required": ["path"],
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        path = params["path"]
        if not os.path.isabs(path):
            raise ToolValidationError(f"Path must be absolute: {path}")
        self._confine(path)

    def run(self, params: Dict[str, Any]) -> ToolResult:
        path = self._confine(params["path"])
        ensure_resolved_within_root(path, self.root, self.name)
        if not os.path.exists(path):
            raise NotFoundError(f"list_directory: path {path} does not exist")
        if not os.path.isdir(path):
            raise ToolError(f"list_directory: path {path} is not a directory")

        lines = []
        with os.scandir(path) as it:
            for entry in sorted(it, key=lambda e: e.name):
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
                lines.append(f"[DIR] {entry.name}" if is_dir else entry.name)
        logger.info("list_directory: '{}' → {} entr(y/ies)", path, len(lines))
        return ToolResult(llm_content=f"Directory listing for {path}:\n" + "\n".join(lines))
