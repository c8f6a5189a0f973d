# tools/read_files.py
from __future__ import annotations

import base64
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from loguru import logger

from errors import ConfinementError
from tools.base import BaseTool, ToolResult
from tools.paths import ensure_resolved_within_root

ENCODINGS = ["utf8", "ascii", "base64", "hex", "binary"]


def decode_bytes(data: bytes, encoding: str) -> str:
    if encoding == "base64":
        return base64.b64encode(data).decode("ascii")
    if encoding == "hex":
        return data.hex()
    if encoding == "ascii":
        return data.decode("ascii", errors="replace")
    if encoding == "binary":
        return data.decode("latin-1")
    return data.decode("utf-8", errors="replace")


class ReadFilesTool(BaseTool):
    """
    Batch read. Individual failures never abort the call: they are collected
    into a trailing === ERRORS === section instead.
    """
    name = "read_files"
    description = (
        "Reads the content of multiple files at the specified paths and formats them for LLM consumption. "
        "Supports various text encodings."
    )
    schema = {
        "type": "object",
        "properties": {
            "paths": {
                "type": "array",
                "items": {"type": "string"},
                "minItems": 1,
                "description": "Paths of the files to read; relative paths are resolved against the project root.",
            },
            "encoding": {
                "type": "string",
                "enum": ENCODINGS,
                "description": "How to render file bytes (default utf8).",
            },
        },
        "required": ["paths"],
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        for p in params["paths"]:
            self._confine(p)

    def _read_one(self, path: str, encoding: str) -> str:
        ensure_resolved_within_root(path, self.root, self.name)
        st = os.stat(path)
        if not os.path.isfile(path):
            raise IsADirectoryError(f"Path {path} is not a file")
        with open(path, "rb") as fh:
            content = decode_bytes(fh.read(), encoding)
        mtime = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat()
        return (
            f"=== FILE: {path} ===\n"
            f"Size: {st.st_size} bytes\n"
            f"Last Modified: {mtime}\n"
            f"Encoding: {encoding}\n\n"
            f"{content}\n\n"
            f"=== END OF FILE: {path} ==="
        )

    def run(self, params: Dict[str, Any]) -> ToolResult:
        encoding = params.get("encoding") or "utf8"
        blocks: List[str] = []
        errors: List[str] = []

        for raw in params["paths"]:
            path = self._confine(raw)
            try:
                blocks.append(self._read_one(path, encoding))
            except IsADirectoryError:
                errors.append(f"{raw}: Path {path} is not a file")
            except FileNotFoundError:
                errors.append(f"{raw}: file not found")
            except PermissionError:
                errors.append(f"{raw}: permission denied")
            except (ConfinementError, OSError) as e:
                errors.append(f"{raw}: {e}")

        summary = f"Read {len(blocks)} files successfully"
        if errors:
            summary += f", with {len(errors)} errors"
        out = summary + ":\n\n" + "\n\n".join(blocks)
        if errors:
            out += "\n\n=== ERRORS ===\n" + "\n".join(errors)
        logger.info("read_files: ok={} errors={} encoding={}", len(blocks), len(errors), encoding)
        return ToolResult(llm_content=out)
