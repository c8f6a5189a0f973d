# errors.py
from __future__ import annotations

from typing import Optional


class WscodeError(Exception):
    """Base class for every error raised by wscode."""


# ---------------- tool level (reported back to the model) ----------------

class ToolError(WscodeError):
    """Raised by a tool's execute(); the agent loop turns it into tool-result text."""


class ToolValidationError(ToolError, ValueError):
    pass


class ConfinementError(ToolValidationError):
    def __init__(self, path: str, root: str, operation: str = ""):
        self.path = path
        self.root = root
        self.operation = operation
        prefix = f"{operation}: " if operation else ""
        super().__init__(f"{prefix}path '{path}' is outside the root directory '{root}'")


class NotFoundError(ToolError, FileNotFoundError):
    pass


class AmbiguityError(ToolError):
    def __init__(self, message: str, count: int):
        self.count = count
        super().__init__(message)


# ---------------- turn level (abort send_prompt) ----------------

class TurnError(WscodeError):
    """A failure that ends the current send_prompt call."""


class ToolNotFoundError(TurnError):
    def __init__(self, name: Optional[str]):
        self.name = name
        super().__init__(f"Tool {name} not found")


class ToolArgumentsError(TurnError):
    def __init__(self, message: str, tool_name: Optional[str] = None):
        self.tool_name = tool_name
        super().__init__(message)


class GatewayError(TurnError):
    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class MaxRoundsExceededError(TurnError):
    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(
            f"send_prompt: model kept requesting tools after {max_rounds} LLM call(s); "
            f"increase max_rounds or rephrase the request"
        )


class ChatBusyError(TurnError):
    pass


# ---------------- programmer errors ----------------

class DuplicateToolError(WscodeError, ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool with name {name} is already registered.")
