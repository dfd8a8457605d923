"""Mistral 非流式 Provider 客户端。

本模块负责：

1. 接收统一的 ChatRequest。
2. 在任何网络 I/O 之前校验请求与 API Key。
3. 调用 {base_url}/chat/completions 并区分网络错误、HTTP 错误。
4. 将响应 JSON 解析为统一的 ChatResult；解析失败单独归类为解码错误。

complete() 从不向调用方抛出预期内的失败：内部抛出的 BusinessError
在边界处统一转换为 Result。
"""

import json
from typing import Any, Dict, Optional

import httpx

from mistral_chat.domain.exceptions import (
    ApiError,
    BusinessError,
    DecodeError,
    NetworkError,
    ValidationError,
)
from mistral_chat.domain.models import (
    ChatChoice,
    ChatMessage,
    ChatRequest,
    ChatResult,
    ChatRole,
    ChatUsage,
)
from mistral_chat.domain.result import Result
from mistral_chat.infrastructure.logging.logger import get_logger

log = get_logger("providers.mistral")


def _completions_url(base_url: str) -> str:
    """拼接 chat/completions 地址；base_url 无法解析时抛出 ValidationError。"""

    url = f"{str(base_url).rstrip('/')}/chat/completions"
    try:
        httpx.URL(url)
    except (httpx.InvalidURL, ValueError) as e:
        raise ValidationError(code="INVALID_BASE_URL", message=f"Invalid base URL {base_url!r}: {e}")
    return url


class MistralClient:
    """Mistral 提供方客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - complete: 对外统一调用入口，返回 Result[ChatResult]。
    """

    name = "mistral"

    def __init__(self, settings):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings

    @property
    def api_key(self) -> Optional[str]:
        return getattr(self._settings, "api_key", None)

    async def complete(self, request: Optional[ChatRequest]) -> Result[ChatResult]:
        """执行一次非流式对话调用。"""

        try:
            return Result.success(await self._complete(request))
        except BusinessError as e:
            log.warning(
                "Completion failed",
                extra={"extra": {"code": e.code, "kind": e.kind, "http_status": e.http_status}},
            )
            return Result.from_error(e)

    async def complete_or_none(self, request: Optional[ChatRequest]) -> Optional[ChatResult]:
        """旧式接口：失败时返回 None，错误只写日志。"""

        result = await self.complete(request)
        if result.is_failure:
            log.error(f"Completion error: {result.error}")
            return None
        return result.value

    async def _complete(self, request: Optional[ChatRequest]) -> ChatResult:
        if request is None:
            raise ValidationError(code="NULL_REQUEST", message="Request cannot be null")
        if not self.api_key or not self.api_key.strip():
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message="API key is not configured")
        if not self.api_key.isascii():
            # HTTP 头只能是 ASCII
            raise ValidationError(code="INVALID_API_KEY", message="API key contains non-ASCII characters")
        url = _completions_url(self._settings.base_url)

        payload = request.with_stream(False).to_payload()
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.InvalidURL as e:
            raise ValidationError(code="INVALID_BASE_URL", message=str(e))
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code >= 400:
            raise ApiError(
                code="API_ERROR",
                message=f"HTTP {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
            )
        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(code="DECODE_ERROR", message=f"Invalid response body: {e}")
        result = self._parse_response(data)
        log.info(
            "Completion received",
            extra={"extra": {"model": result.model, "choices": len(result.choices)}},
        )
        return result

    @staticmethod
    def _parse_response(data: Any) -> ChatResult:
        """将原始响应 JSON 解析为统一的 ChatResult。"""

        if not isinstance(data, dict):
            raise DecodeError(code="DECODE_ERROR", message="Response body is not a JSON object")
        raw_choices = data.get("choices") or []
        if not isinstance(raw_choices, list):
            raise DecodeError(code="DECODE_ERROR", message="Response 'choices' is not a list")
        choices: list[ChatChoice] = []
        for i, ch in enumerate(raw_choices):
            msg = ch.get("message") if isinstance(ch, dict) else None
            if not isinstance(msg, dict):
                raise DecodeError(code="DECODE_ERROR", message=f"Choice {i} has no message")
            content = msg.get("content") or ""
            if not isinstance(content, str):
                raise DecodeError(code="DECODE_ERROR", message=f"Choice {i} content is not text")
            role = msg.get("role")
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=ChatMessage(
                        role=ChatRole.from_api(role) if isinstance(role, str) else ChatRole.ASSISTANT,
                        content=content,
                    ),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        return ChatResult(
            id=str(data.get("id") or ""),
            model=str(data.get("model") or ""),
            choices=choices,
            usage=_parse_usage(data.get("usage")),
            raw=data,
        )


def _parse_usage(raw: Any) -> Optional[ChatUsage]:
    if not isinstance(raw, dict) or not raw:
        return None
    usage: Dict[str, int] = {}
    for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
        try:
            usage[key] = int(raw.get(key) or 0)
        except (TypeError, ValueError):
            usage[key] = 0
    return ChatUsage(**usage)
