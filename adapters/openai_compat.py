# adapters/openai_compat.py
from __future__ import annotations

import os
import time
from typing import Any, Dict, List, Optional

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from adapters.base import LLMGateway
from errors import GatewayError
from messages import ASSISTANT, Message
from models import LLMModel
from tools.tool_schema import ToolDescriptor, to_openai_tools

RETRY_STATUSES = (429, 500, 502, 503, 504)


class OpenAICompatGateway(LLMGateway):
    """
    /chat/completions over requests. Works with OpenAI, OpenRouter and local
    OpenAI-compatible servers. One instance per Chat: it owns its session and
    reads credentials when constructed, so sessions never share a client.
    """

    def __init__(self, model: LLMModel, session: Optional[requests.Session] = None):
        self.model = model
        self.url = (model.endpoint or "https://api.openai.com/v1").rstrip("/") + "/chat/completions"
        self.session = session or self._build_session(model.max_retries)
        self._headers = self._build_headers()
        logger.info(
            "OpenAICompatGateway init → name='{}' provider='{}' endpoint='{}'",
            model.name, model.provider, model.endpoint,
        )

    @staticmethod
    def _build_session(max_retries: int) -> requests.Session:
        retry = Retry(
            total=max_retries,
            backoff_factor=1.0,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset({"POST"}),
            raise_on_status=False,
        )
        s = requests.Session()
        s.mount("https://", HTTPAdapter(max_retries=retry))
        s.mount("http://", HTTPAdapter(max_retries=retry))
        return s

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.model.api_key_reqd:
            if not self.model.api_key_env:
                msg = f"Model '{self.model.name}' requires an API key but 'api_key_env' is not set in config."
                logger.error("_build_headers: {}", msg)
                raise GatewayError(msg)
            key = os.getenv(self.model.api_key_env)
            if not key:
                msg = f"{self.model.api_key_env} environment variable is required (add it to your .env)"
                logger.error("_build_headers: {}", msg)
                raise GatewayError(msg)
            headers["Authorization"] = f"Bearer {key}"
            logger.debug("_build_headers: using env '{}'", self.model.api_key_env)
        headers.update(self.model.extra_headers or {})
        return headers

    def _payload(self, history: List[Message], tool_schemas: List[ToolDescriptor]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model.resolved_model(),
            "messages": [m.to_openai() for m in history],
            "stream": False,
        }
        if self.model.temperature is not None:
            payload["temperature"] = self.model.temperature
        if self.model.max_tokens is not None:
            payload["max_tokens"] = self.model.max_tokens
        if tool_schemas:
            payload["tools"] = to_openai_tools(tool_schemas)
            payload["tool_choice"] = "auto"
        return payload

    def complete(self, history: List[Message], tool_schemas: List[ToolDescriptor]) -> Optional[Message]:
        payload = self._payload(history, tool_schemas)
        logger.info("openai_compat.complete → url='{}' model='{}' messages={} tools={}",
                    self.url, payload["model"], len(history), len(tool_schemas))
        t0 = time.time()
        try:
            resp = self.session.post(self.url, headers=self._headers, json=payload, timeout=self.model.timeout_s)
        except requests.RequestException as e:
            logger.error("openai_compat.complete ✗ transport: {}", e)
            raise GatewayError(f"LLM request to {self.url} failed: {e}") from e
        dt = (time.time() - t0) * 1000.0
        logger.info("openai_compat.complete ← status={} time_ms≈{:.0f}", resp.status_code, dt)

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = resp.status_code
            server_text = (resp.text or "")[:500]
            logger.error("openai_compat.complete: HTTP {} {}", status, server_text)
            if status == 401:
                raise GatewayError(
                    f"401 Unauthorized from {self.url}. Check {self.model.api_key_env or 'the API key'}.",
                    status,
                ) from e
            raise GatewayError(f"LLM error {status}: {server_text}", status) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise GatewayError(f"LLM returned a non-JSON body: {(resp.text or '')[:200]}") from e
        if not isinstance(data, dict):
            raise GatewayError(f"LLM returned an unexpected body type: {type(data).__name__}")
        if data.get("error"):
            raise GatewayError(f"LLM error: {data['error']}")

        choices = data.get("choices") or []
        msg = choices[0].get("message") if choices and isinstance(choices[0], dict) else None
        if not msg:
            logger.warning("openai_compat.complete: response carried no message")
            return None
        msg = {**msg, "role": ASSISTANT}
        message = Message.from_openai(msg)
        logger.debug("openai_compat.complete: content_len={} tool_calls={}",
                     len(message.content or ""), len(message.tool_calls))
        return message
