# tools/base.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from errors import ConfinementError, ToolError, ToolValidationError
from tools.paths import ensure_within_root, normalize
from tools.tool_schema import ToolDescriptor, format_schema_errors, validate_schema


@dataclass
class ToolResult:
    """Single text blob handed back to the model."""
    llm_content: str


class BaseTool:
    """
    Shared contract for every tool.

    Subclasses set `name`, `description`, `schema` and implement `run()`.
    `_check_semantics()` holds the tool-specific preconditions that can be
    decided without touching the filesystem.
    """
    name: str = ""
    description: str = ""
    schema: Dict[str, Any] = {"type": "object", "properties": {}}

    def __init__(self, root_directory: str | None = None):
        self.root = normalize(root_directory or os.getcwd())

    @property
    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(self.name, self.description, self.schema)

    # ---------------- validation ----------------

    def _check(self, params: Any) -> Dict[str, Any]:
        problems = format_schema_errors(validate_schema(self.schema, params))
        if problems:
            raise ToolValidationError(problems)
        self._check_semantics(params)
        return params

    def _check_semantics(self, params: Dict[str, Any]) -> None:
        return None

    def validate_tool_params(self, params: Any) -> Optional[str]:
        """Pure: returns an error message, or None when the params are acceptable."""
        try:
            self._check(params)
        except ToolError as e:
            return str(e)
        return None

    # ---------------- execution ----------------

    def execute(self, params: Dict[str, Any]) -> ToolResult:
        try:
            self._check(params)
        except ConfinementError:
            raise
        except ToolValidationError as e:
            raise ToolValidationError(f"Invalid parameters for {self.name} tool: {e}") from e
        return self.run(params)

    def run(self, params: Dict[str, Any]) -> ToolResult:
        raise NotImplementedError

    # ---------------- helpers ----------------

    def _confine(self, path: str) -> str:
        """Join relative paths to the root, normalize, reject escapes."""
        if "\x00" in path:
            raise ToolValidationError(f"{self.name}: path {path!r} contains a NUL byte")
        return ensure_within_root(normalize(path, self.root), self.root, self.name)

