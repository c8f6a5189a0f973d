# tools/edit_file.py
from __future__ import annotations

import codecs
import os
import stat
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from loguru import logger

from errors import AmbiguityError, NotFoundError, ToolError, ToolValidationError
from tools.base import BaseTool, ToolResult
from tools.paths import ensure_resolved_within_root


def detect_encoding(raw: bytes) -> Tuple[str, str]:
    """Returns (codec, decoded text). UTF-8 (with/without BOM) first, latin-1 as last resort."""
    if raw.startswith(codecs.BOM_UTF8):
        return "utf-8-sig", raw.decode("utf-8-sig")
    try:
        return "utf-8", raw.decode("utf-8")
    except UnicodeDecodeError:
        return "latin-1", raw.decode("latin-1")


def _atomic_write(path: str, data: bytes) -> None:
    """mkstemp in the same directory + os.replace; the original stays intact on failure."""
    mode = stat.S_IMODE(os.stat(path).st_mode)
    fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".wscode_tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class EditFileTool(BaseTool):
    """The only mutating tool: replaces exactly one occurrence, refuses to guess otherwise."""
    name = "edit_file"
    description = (
        "Edits a file by replacing one exact occurrence of old_content with new_content. "
        "old_content must appear in the file exactly once."
    )
    schema = {
        "type": "object",
        "properties": {
            "file_path": {
                "type": "string",
                "description": "The absolute path to the file to modify.",
            },
            "old_content": {
                "type": "string",
                "description": (
                    "The exact literal text to replace, unescaped. Include enough surrounding context "
                    "(at least 3 lines before and after) that it matches exactly one location, "
                    "whitespace and indentation included."
                ),
            },
            "new_content": {
                "type": "string",
                "description": "The exact literal text to put in place of old_content.",
            },
        },
        "required": ["file_path", "old_content", "new_content"],
    }

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        path = params["file_path"]
        if not os.path.isabs(path):
            raise ToolValidationError(f"file_path must be absolute: {path}")
        if params["old_content"] == "":
            raise ToolValidationError("old_content must not be empty")
        self._confine(path)

    def run(self, params: Dict[str, Any]) -> ToolResult:
        path = self._confine(params["file_path"])
        real = ensure_resolved_within_root(path, self.root, self.name)
        old, new = params["old_content"], params["new_content"]

        if not os.path.exists(path):
            raise NotFoundError(f"Failed to edit file {path}: file does not exist")
        if not os.path.isfile(path):
            raise ToolError(f"Failed to edit file {path}: path is not a file")

        with open(path, "rb") as fh:
            codec, current = detect_encoding(fh.read())

        count = current.count(old)
        if count == 0:
            raise NotFoundError(
                f"Failed to edit file {path}: old content not found in file. Make sure old_content exactly "
                f"matches the text in the file including whitespace and indentation."
            )
        if count > 1:
            raise AmbiguityError(
                f"Failed to edit file {path}: old content appears {count} times in file. "
                f"Please provide more specific context to uniquely identify the text to replace.",
                count,
            )

        updated = current.replace(old, new, 1)
        try:
            data = updated.encode(codec)
        except UnicodeEncodeError as e:
            bad = e.object[e.start:e.end]
            raise ToolError(
                f"Failed to edit file {path}: new content has {bad!r}, which the file's {codec} encoding "
                f"cannot represent. The file was not changed."
            ) from e
        # write through to the link target so a symlink inside the root stays a symlink
        _atomic_write(real, data)

        st = os.stat(path)
        delta = len(new) - len(old)
        mtime = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat()
        logger.info("edit_file: '{}' codec={} delta={:+d} chars", path, codec, delta)
        return ToolResult(
            llm_content=(
                f"Successfully edited file: {path}\n"
                f"File size: {st.st_size} bytes\n"
                f"Last modified: {mtime}\n\n"
                f"Changes made:\n"
                f"- Replaced {len(old)} characters with {len(new)} characters\n"
                f"- Net change: {delta:+d} characters\n\n"
                f"The file has been successfully updated."
            )
        )
