# adapters/__init__.py
from adapters.base import LLMGateway
from adapters.openai_compat import OpenAICompatGateway

__all__ = ["LLMGateway", "OpenAICompatGateway"]
