# models.py
import json
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from loguru import logger

DEFAULT_MODEL_NAME = "anthropic/claude-sonnet-4"
DEFAULT_ENDPOINT = "https://openrouter.ai/api/v1"
DEFAULT_KEY_ENV = "OPENROUTER_KEY"


@dataclass
class LLMModel:
    name: str
    provider: str = "openrouter"
    endpoint: str = DEFAULT_ENDPOINT
    model: Optional[str] = None
    temperature: Optional[float] = None     # None → server default
    max_tokens: Optional[int] = None
    timeout_s: float = 300.0
    max_retries: int = 2
    # API key handling is driven entirely by config:
    api_key_reqd: bool = True
    api_key_env: Optional[str] = DEFAULT_KEY_ENV
    extra_headers: Optional[Dict[str, str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LLMModel":
        temp = d.get("temperature")
        max_tokens = d.get("max_tokens")
        m = cls(
            name=d.get("name"),
            provider=d.get("provider", "openrouter"),
            endpoint=d.get("endpoint", DEFAULT_ENDPOINT),
            model=d.get("model"),
            temperature=float(temp) if temp is not None else None,
            max_tokens=int(max_tokens) if max_tokens is not None else None,
            timeout_s=float(d.get("timeout_s", 300.0)),
            max_retries=int(d.get("max_retries", 2)),
            api_key_reqd=bool(d.get("api_key_reqd", True)),
            api_key_env=d.get("api_key_env", DEFAULT_KEY_ENV),
            extra_headers=d.get("extra_headers") or None,
        )
        logger.debug(
            "LLMModel.from_dict → name='{}', provider='{}', endpoint='{}', model='{}'",
            m.name, m.provider, m.endpoint, m.model,
        )
        return m

    @classmethod
    def default(cls) -> "LLMModel":
        return cls(name=DEFAULT_MODEL_NAME)

    def resolved_model(self) -> str:
        return self.model or self.name


class ModelRegistry:
    """
    Reads a models.json shaped like:
    {
      "default_llm_model": "anthropic/claude-sonnet-4",
      "llm_models": [ {...}, {...} ]
    }
    A missing file is not an error: the built-in OpenRouter default is used.
    """
    def __init__(self, config_path: Optional[str] = None):
        self.models: Dict[str, LLMModel] = {}
        self.default_name: Optional[str] = None
        if config_path and Path(config_path).exists():
            self.load(config_path)
        else:
            if config_path:
                logger.info("No model config at '{}'; using built-in default model", config_path)
            builtin = LLMModel.default()
            self.models[builtin.name] = builtin
            self.default_name = builtin.name

    def load(self, path: str):
        cfg_path = Path(path)
        logger.info("Loading model config from '{}'", str(cfg_path.resolve()))
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error("Failed to parse model config JSON '{}': {}", str(cfg_path), e)
            raise ValueError(f"Invalid JSON in model config {cfg_path}: {e}") from e

        entries = data.get("llm_models") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.error("Invalid model config: expected an 'llm_models' array in '{}'", str(cfg_path))
            raise ValueError(f"Invalid model config {cfg_path}: expected an 'llm_models' array.")
        self.default_name = data.get("default_llm_model")

        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                logger.warning("Skipping invalid model entry: {}", entry)
                continue
            m = LLMModel.from_dict(entry)
            self.models[m.name] = m

        if not self.default_name and self.models:
            self.default_name = next(iter(self.models.keys()))
        logger.info("ModelRegistry loaded {} model(s); default='{}'", len(self.models), self.default_name)
        if not self.models:
            logger.warning("No models loaded from '{}'. Check your config.", str(cfg_path.resolve()))

    def get(self, name: Optional[str] = None) -> LLMModel:
        if name:
            if name not in self.models:
                logger.error("Requested model '{}' not found. Available: {}", name, ", ".join(self.models.keys()))
                raise ValueError(f"Model '{name}' not found. Available: {', '.join(self.models.keys())}")
            return self.models[name]
        if not self.default_name or self.default_name not in self.models:
            logger.error("No default model configured and none specified.")
            raise ValueError("No default model configured and none specified.")
        return self.models[self.default_name]

    def list(self) -> List[LLMModel]:
        return list(self.models.values())
