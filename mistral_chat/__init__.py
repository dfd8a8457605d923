"""Mistral Chat 顶层包。

该包提供与 Mistral chat/completions 接口进行多轮对话的客户端核心，
包括配置加载、领域模型、SSE 流式解码、流式会话、非流式客户端、
对话控制器与历史裁剪策略。
"""

from mistral_chat.api.service import ask, create_chat_controller
from mistral_chat.chat.controller import ChatController, ChatState
from mistral_chat.config.settings import Settings, load_settings

__all__ = ["ChatController", "ChatState", "Settings", "ask", "create_chat_controller", "load_settings"]
