# adapters/base.py
from __future__ import annotations

from typing import List, Optional

from messages import Message
from tools.tool_schema import ToolDescriptor


class LLMGateway:
    """
    Request/response boundary to a completion API.

    complete() gets the full history plus the tool declarations and returns the
    assistant's reply, or None when the service produced no message at all.
    Transport failures raise errors.GatewayError.
    """

    def complete(self, history: List[Message], tool_schemas: List[ToolDescriptor]) -> Optional[Message]:
        raise NotImplementedError
