"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
"""

from typing import Optional

from mistral_chat.chat.controller import ChatController
from mistral_chat.config.settings import Settings, load_settings
from mistral_chat.domain.exceptions import ApiError
from mistral_chat.domain.models import ChatMessage, ChatRequest
from mistral_chat.infrastructure.logging.logger import logger, setup_logger
from mistral_chat.providers.mistral_client import MistralClient
from mistral_chat.providers.registry import resolve_model
from mistral_chat.streaming.session import StreamingSession


def create_chat_controller(settings: Optional[Settings] = None) -> ChatController:
    """按配置创建 ChatController，并初始化日志。

    Args:
        settings: 配置；不提供时从环境变量 / .env / config.yaml 加载。
    """
    settings = settings or load_settings()
    setup_logger(settings)
    return ChatController(
        settings,
        client=MistralClient(settings),
        streaming=StreamingSession(settings),
    )


async def ask(text: str, model: Optional[str] = None, settings: Optional[Settings] = None) -> str:
    """单轮非流式问答，直接返回回答文本。

    Raises:
        ApiError: 请求失败或没有返回任何候选回答。
    """
    settings = settings or load_settings()
    setup_logger(settings)
    messages = []
    if settings.system_prompt:
        messages.append(ChatMessage.system(settings.system_prompt))
    messages.append(ChatMessage.user(text))
    request = ChatRequest.build(
        model=resolve_model(model or settings.default_model),
        messages=messages,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        top_p=settings.top_p,
        safe_prompt=settings.safe_prompt,
    )
    result = await MistralClient(settings).complete(request)
    if result.is_failure:
        logger.error(f"Ask failed: {result.error}", extra={"extra": {"kind": result.kind.value}})
        raise ApiError(
            code=f"{result.kind.value.upper()}_ERROR",
            message=result.error,
            http_status=result.http_status,
        )
    content = result.value.first_content
    if content is None:
        raise ApiError(code="NO_CHOICES", message="No response received from Mistral API")
    return content
