"""LLM Provider 集成层。

该包下的模块负责：
- 定义客户端抽象协议 (base)。
- 维护逻辑模型名到模型 ID 的映射 (registry)。
- 提供 Mistral 的非流式实现 (mistral_client)。
"""

from mistral_chat.providers.base import CompletionClient, StreamingClient
from mistral_chat.providers.mistral_client import MistralClient
from mistral_chat.providers.registry import resolve_model

__all__ = ["CompletionClient", "MistralClient", "StreamingClient", "resolve_model"]
