"""Provider 抽象接口。

ChatController 不直接依赖具体的 HTTP 实现，而是依赖以下协议：

- CompletionClient: 非流式调用，返回 Result[ChatResult]（如 MistralClient）。
- StreamingClient: 流式调用，通过回调推送片段（如 StreamingSession）。

测试中可以用任意满足协议的假对象替换真实网络实现。
"""

from typing import Callable, Optional, Protocol

from mistral_chat.domain.models import ChatRequest, ChatResult
from mistral_chat.domain.result import Result


class CompletionClient(Protocol):
    """非流式客户端协议。"""

    name: str

    @property
    def api_key(self) -> Optional[str]:
        ...

    async def complete(self, request: Optional[ChatRequest]) -> Result[ChatResult]:
        ...


class StreamingClient(Protocol):
    """流式客户端协议。

    start() 同步返回；on_error 与 on_complete 恰好调用其一，
    cancel() 之后两者都不再调用。
    """

    @property
    def is_active(self) -> bool:
        ...

    def start(
        self,
        request: Optional[ChatRequest],
        api_key: Optional[str],
        on_fragment: Callable[[str], None],
        on_error: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        ...

    def cancel(self) -> None:
        ...

    async def wait(self) -> None:
        ...
