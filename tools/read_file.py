# tools/read_file.py
from __future__ import annotations

import os
from typing import Any, Dict

from loguru import logger

from errors import NotFoundError, ToolError, ToolValidationError
from tools.base import BaseTool, ToolResult
from tools.paths import ensure_resolved_within_root


class ReadFileTool(BaseTool):
    name = "read_file"
    description = (
        "Reads the content of a file at the specified absolute path. "
        "Supports optional offset and limit for partial reads."
    )
    schema = {
        "type": "object",
        "properties": {
            "absolute_path": {
                "type": "string",
                "description": (
                    "The absolute path to the file to read (e.g., '/home/user/project/file.txt'). "
                    "Relative paths are not supported."
                ),
            },
            "offset": {
                "type": "integer",
                "description": "Optional: the 0-based line number to start reading from. Use for paginating through large files.",
            },
            "limit": {
                "type": "integer",
                "description": "Optional: maximum number of lines to read. If omitted, reads to the end of the file.",
            },
        },
        "required": ["absolute_path"],
        "additionalProperties": False,
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        path = params["absolute_path"]
        if not os.path.isabs(path):
            raise ToolValidationError(f"absolute_path must be absolute: {path}")
        for key in ("offset", "limit"):
            if params.get(key) is not None and params[key] < 0:
                raise ToolValidationError(f"{key} must be >= 0 (got {params[key]})")
        self._confine(path)

    def run(self, params: Dict[str, Any]) -> ToolResult:
        path = self._confine(params["absolute_path"])
        ensure_resolved_within_root(path, self.root, self.name)
        if not os.path.exists(path):
            raise NotFoundError(f"Failed to read file {path}: file does not exist")
        if not os.path.isfile(path):
            raise ToolError(f"Failed to read file {path}: path is not a file")

        try:
            with open(path, "r", encoding="utf-8", newline="") as fh:
                text = fh.read()
        except UnicodeDecodeError as e:
            raise ToolError(f"Failed to read file {path}: not valid UTF-8 text ({e.reason})") from e
        file_size = os.path.getsize(path)

        lines = text.split("\n")
        offset = int(params.get("offset") or 0)
        limit = params.get("limit")
        selected = lines[offset:]
        if limit:
            # 0 means "no cap", same as omitting it
            selected = selected[: int(limit)]
        content = "\n".join(selected)

        header = [
            f"Successfully read file: {path}",
            f"File size: {file_size} bytes",
            f"Total lines: {len(lines)}",
            f"Lines read: {len(selected)}",
            f"Bytes read: {len(content.encode('utf-8'))} bytes",
        ]
        if offset:
            header.append(f"Starting from line: {offset}")
        if limit:
            header.append(f"Line limit: {int(limit)}")
        logger.info("read_file: '{}' lines={}/{} offset={} limit={}", path, len(selected), len(lines), offset, limit)
        return ToolResult(llm_content="\n".join(header) + "\n\nContent:\n" + content)
