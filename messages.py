# messages.py
from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"
TOOL = "tool"

ROLES = (SYSTEM, USER, ASSISTANT, TOOL)


@dataclass
class ToolCall:
    """A tool request as emitted by the model. Nothing in here is trusted."""
    id: str
    name: str
    raw_arguments: str = "{}"

    def to_openai(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }

    @classmethod
    def from_openai(cls, d: Dict[str, Any]) -> "ToolCall":
        fn = d.get("function") or {}
        args = fn.get("arguments")
        if args is None:
            args = "{}"
        elif not isinstance(args, str):
            # some OpenAI-compatible servers send the object itself
            args = json.dumps(args)
        return cls(id=str(d.get("id") or ""), name=str(fn.get("name") or ""), raw_arguments=args)


@dataclass
class Message:
    role: str
    content: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_call_id: Optional[str] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Message: unknown role '{self.role}' (expected one of {', '.join(ROLES)})")
        if self.tool_calls and self.role != ASSISTANT:
            raise ValueError(f"Message: only assistant messages carry tool calls (got role '{self.role}')")
        if self.role == TOOL and not self.tool_call_id:
            raise ValueError("Message: tool-result messages need a tool_call_id")

    # ---- factories ----

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=USER, content=content)

    @classmethod
    def assistant(cls, content: Optional[str] = None, tool_calls: Optional[List[ToolCall]] = None) -> "Message":
        return cls(role=ASSISTANT, content=content, tool_calls=list(tool_calls or []))

    @classmethod
    def tool_result(cls, tool_call_id: str, content: str) -> "Message":
        return cls(role=TOOL, content=content, tool_call_id=tool_call_id)

    # ---- wire format ----

    def to_openai(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            out["tool_calls"] = [tc.to_openai() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        return out

    @classmethod
    def from_openai(cls, d: Dict[str, Any]) -> "Message":
        calls = []
        for tc in d.get("tool_calls") or []:
            if tc.get("type", "function") != "function":
                continue
            calls.append(ToolCall.from_openai(tc))
        return cls(
            role=d.get("role") or ASSISTANT,
            content=d.get("content"),
            tool_calls=calls,
            tool_call_id=d.get("tool_call_id"),
        )

    def copy(self) -> "Message":
        return copy.deepcopy(self)
