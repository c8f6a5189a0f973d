# agent.py
from __future__ import annotations

import json
import threading
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from adapters.base import LLMGateway
from errors import (
    ChatBusyError,
    GatewayError,
    MaxRoundsExceededError,
    ToolArgumentsError,
    ToolError,
    ToolNotFoundError,
)
from messages import ASSISTANT, Message, ToolCall
from prompts import build_system_prompt
from tools.registry import ToolRegistry
from tools.tool_schema import ToolDescriptor, format_schema_errors, validate_schema

Observer = Callable[[str, Dict[str, Any]], None]

SKIPPED_CALL_TEXT = "Error: not executed because an earlier tool call in this batch failed"


class ChatState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_LLM = "awaiting_llm"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


class Chat:
    """
    The agent loop: one conversation, one tool registry, one gateway.

    send_prompt() appends the user text, then alternates LLM calls and tool
    execution until the model answers without tool calls.

    Failure policy:
      - errors raised by a tool while executing (bad path, missing file,
        ambiguous edit, or any unexpected exception) become an "Error: ..."
        tool result so the model can correct itself, and the rest of the
        batch still runs;
      - an unknown tool name, arguments that are not JSON or that violate the
        tool schema, and gateway failures end the turn with a TurnError.
        Before raising, every still-unanswered call of the batch gets an error
        result so the history stays well formed for the next prompt.

    A Chat is not re-entrant: callers must serialize send_prompt() per
    instance. Overlapping calls are rejected with ChatBusyError. Separate
    instances share nothing and can run in parallel.
    """

    def __init__(
        self,
        gateway: LLMGateway,
        registry: ToolRegistry,
        system_prompt: Optional[str] = None,
        max_rounds: Optional[int] = None,
        observers: Iterable[Observer] = (),
    ):
        if max_rounds is not None and max_rounds < 1:
            raise ValueError(f"max_rounds must be a positive integer or None (got {max_rounds})")
        self.gateway = gateway
        self.registry = registry
        self.max_rounds = max_rounds
        self.system_prompt = system_prompt or build_system_prompt(registry.root, registry.list_names())
        self._observers: List[Observer] = list(observers)
        self._history: List[Message] = [Message.system(self.system_prompt)]
        self._state = ChatState.AWAITING_USER_INPUT
        self._lock = threading.Lock()
        logger.info(
            "Chat init → gateway={} root='{}' tools={} max_rounds={}",
            type(gateway).__name__, registry.root, len(registry), max_rounds,
        )

    # --------------------------- Public API ---------------------------

    @property
    def state(self) -> ChatState:
        return self._state

    def available_tools(self) -> List[str]:
        return self.registry.list_names()

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def get_history(self) -> List[Message]:
        """Deep copy; mutating it never affects the conversation."""
        return [m.copy() for m in self._history]

    def clear_history(self) -> None:
        if not self._lock.acquire(blocking=False):
            raise ChatBusyError("clear_history: a send_prompt call is still running on this Chat")
        try:
            self._history = [Message.system(self.system_prompt)]
            self._state = ChatState.AWAITING_USER_INPUT
            logger.info("Chat history cleared")
        finally:
            self._lock.release()

    def send_prompt(self, text: str) -> Optional[str]:
        """Run one user turn; returns the model's final text answer."""
        if not self._lock.acquire(blocking=False):
            raise ChatBusyError(
                "send_prompt: another call is already running on this Chat; serialize calls per instance"
            )
        try:
            return self._run_turn(text)
        finally:
            self._lock.release()

    # --------------------------- Loop ---------------------------

    def _run_turn(self, text: str) -> Optional[str]:
        logger.info("Chat.send_prompt → prompt='{}...'", (text or "")[:200])
        self._history.append(Message.user(text))
        self._emit("turn_start", {"prompt": text})
        schemas = self.registry.all_schemas()
        rounds = 0
        try:
            while True:
                if self.max_rounds is not None and rounds >= self.max_rounds:
                    raise MaxRoundsExceededError(self.max_rounds)
                rounds += 1

                self._state = ChatState.AWAITING_LLM
                reply = self._call_llm(schemas, rounds)
                self._history.append(reply)
                self._emit("llm_response", {
                    "round": rounds,
                    "content": reply.content,
                    "tool_calls": [tc.name for tc in reply.tool_calls],
                })

                if not reply.tool_calls:
                    self._state = ChatState.DONE
                    logger.info("Chat.send_prompt ← final answer after {} round(s) ({} chars)",
                                rounds, len(reply.content or ""))
                    self._emit("turn_end", {"rounds": rounds, "content": reply.content})
                    return reply.content

                self._state = ChatState.EXECUTING_TOOLS
                self._run_tool_calls(reply.tool_calls)
        except Exception as e:
            self._state = ChatState.FAILED
            logger.error("Chat.send_prompt ✗ {}: {}", type(e).__name__, e)
            self._emit("turn_error", {"error": str(e), "type": type(e).__name__, "rounds": rounds})
            raise

    def _call_llm(self, schemas: List[ToolDescriptor], round_no: int) -> Message:
        self._emit("llm_request", {"round": round_no, "messages": len(self._history)})
        try:
            reply = self.gateway.complete(self.get_history(), schemas)
        except GatewayError as e:
            self._history.append(Message.assistant(f"Error: {e}"))
            raise
        except Exception as e:
            self._history.append(Message.assistant(f"Error: LLM call failed: {e}"))
            raise GatewayError(f"LLM call failed: {type(e).__name__}: {e}") from e

        if reply is None:
            self._history.append(Message.assistant("Error: no response from LLM"))
            raise GatewayError("No response from LLM")
        if reply.role != ASSISTANT:
            self._history.append(Message.assistant(f"Error: LLM replied with role '{reply.role}'"))
            raise GatewayError(f"LLM replied with role '{reply.role}', expected '{ASSISTANT}'")
        self._check_call_ids(reply)
        return reply

    def _check_call_ids(self, reply: Message) -> None:
        """Ids are the only link between a call and its result: fill blanks, refuse clashes."""
        seen = {tc.id for m in self._history for tc in m.tool_calls}
        for tc in reply.tool_calls:
            if not tc.id:
                tc.id = f"call_{uuid.uuid4().hex}"
                logger.warning("tool call without id; assigned '{}'", tc.id)
            if tc.id in seen:
                self._history.append(Message.assistant(f"Error: duplicate tool call id '{tc.id}'"))
                raise GatewayError(f"LLM reused tool call id '{tc.id}'")
            seen.add(tc.id)

    def _run_tool_calls(self, calls: List[ToolCall]) -> None:
        # in order; a later call may read what an earlier edit wrote
        for idx, call in enumerate(calls):
            try:
                content = self._dispatch(call)
            except Exception as e:
                self._history.append(Message.tool_result(call.id, f"Error: {e}"))
                for rest in calls[idx + 1:]:
                    self._history.append(Message.tool_result(rest.id, SKIPPED_CALL_TEXT))
                raise
            self._history.append(Message.tool_result(call.id, content))

    def _dispatch(self, call: ToolCall) -> str:
        tool = self.registry.get(call.name)
        if tool is None:
            raise ToolNotFoundError(call.name)

        raw = call.raw_arguments if call.raw_arguments is not None else ""
        try:
            params = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(f"Invalid JSON in tool arguments: {raw}", call.name) from e

        problems = format_schema_errors(validate_schema(tool.schema, params))
        if problems:
            raise ToolArgumentsError(f"Invalid arguments for tool {call.name}: {problems}", call.name)

        self._emit("tool_start", {"id": call.id, "name": call.name, "params": params})
        try:
            content = tool.execute(params).llm_content
            ok = True
        except ToolError as e:
            content, ok = f"Error: {e}", False
        except OSError as e:
            content, ok = f"Error: {call.name} failed: {e}", False
        except Exception as e:
            logger.opt(exception=True).warning("tool '{}' raised {}", call.name, type(e).__name__)
            content, ok = f"Error: {call.name} failed: {type(e).__name__}: {e}", False
        logger.info("{} tool '{}' (call id={})", "✓" if ok else "✗", call.name, call.id)
        self._emit("tool_end", {"id": call.id, "name": call.name, "ok": ok, "chars": len(content)})
        return content

    # --------------------------- Observers ---------------------------

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        for obs in self._observers:
            try:
                obs(event, payload)
            except Exception:
                # observer failures never change the turn outcome
                logger.opt(exception=True).warning("observer {!r} failed on '{}'", obs, event)
