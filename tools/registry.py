# tools/registry.py
from __future__ import annotations

import os
from typing import Dict, List, Optional

from loguru import logger

from errors import DuplicateToolError
from logging_decorators import log_call
from tools.base import BaseTool
from tools.edit_file import EditFileTool
from tools.glob_tool import GlobTool
from tools.grep import GrepTool
from tools.ls import LsTool
from tools.paths import normalize
from tools.read_file import ReadFileTool
from tools.read_files import ReadFilesTool
from tools.tool_schema import ToolDescriptor

BUILTIN_TOOLS = (LsTool, ReadFileTool, ReadFilesTool, GlobTool, GrepTool, EditFileTool)


class ToolRegistry:
    """
    Closed name → tool mapping, filled once at construction.
    The public surface:
      - register(tool)            (duplicate names are a programmer error)
      - get(name) -> tool | None  (absence is a normal outcome)
      - list_names(), all_schemas()
    """
    def __init__(self, root_directory: str | None = None):
        self.root = normalize(root_directory or os.getcwd())
        if not os.path.isdir(self.root):
            raise NotADirectoryError(f"ToolRegistry: root directory {self.root} does not exist or is not a directory")
        self._tools: Dict[str, BaseTool] = {}
        logger.debug("ToolRegistry init → root='{}'", self.root)

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            logger.error("register: duplicate tool name '{}'", tool.name)
            raise DuplicateToolError(tool.name)
        # per-instance wrap so every execution is logged with timing
        tool.execute = log_call(f"tool:{tool.name}")(tool.execute)
        self._tools[tool.name] = tool
        logger.debug("Registered tool '{}'", tool.name)

    def get(self, name: Optional[str]) -> Optional[BaseTool]:
        if not name:
            return None
        return self._tools.get(name)

    def list_names(self) -> List[str]:
        return list(self._tools.keys())

    def all_schemas(self) -> List[ToolDescriptor]:
        return [t.descriptor for t in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)


def build_base_registry(root_directory: str | None = None) -> ToolRegistry:
    """Registry with the built-in tool set, every tool bound to the same root."""
    registry = ToolRegistry(root_directory)
    for cls in BUILTIN_TOOLS:
        registry.register(cls(registry.root))
    logger.info("ToolRegistry ready → root='{}' tools={}", registry.root, registry.list_names())
    return registry
