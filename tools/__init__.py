# tools/__init__.py
from tools.base import BaseTool, ToolResult
from tools.registry import ToolRegistry, build_base_registry

__all__ = ["BaseTool", "ToolResult", "ToolRegistry", "build_base_registry"]
