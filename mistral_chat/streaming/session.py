"""流式会话：管理单个进行中的 SSE 请求。

StreamingSession 同一时间只持有一个流。start() 会先取消上一个流（在参数校验之前），
然后在当前事件循环中创建新的任务：

1. 以 stream=True 向 {base_url}/chat/completions 发起 POST。
2. 把收到的每个文本块交给全新的 SseDecoder。
3. 按到达顺序把片段转发给 on_fragment。

流的结束由以下三者中最先发生的一个决定：解码器收到 [DONE]、
传输层正常读完响应体、传输层失败。无论哪种情况，on_complete 与
on_error 恰好调用其一，且最多一次；cancel() 之后两者都不会再调用。
"""

import asyncio
from typing import Callable, Optional

import httpx

from mistral_chat.domain.exceptions import ApiError, BusinessError, NetworkError, ValidationError
from mistral_chat.domain.models import ChatRequest
from mistral_chat.infrastructure.logging.logger import get_logger
from mistral_chat.streaming.sse import SseDecoder

log = get_logger("streaming")


class _StreamState:
    """单个流的回调守卫，保证结束回调至多触发一次。"""

    def __init__(
        self,
        on_fragment: Callable[[str], None],
        on_error: Optional[Callable[[str], None]],
        on_complete: Optional[Callable[[], None]],
    ):
        self._on_fragment = on_fragment
        self._on_error = on_error
        self._on_complete = on_complete
        self.finished = False
        self.cancelled = False

    @property
    def closed(self) -> bool:
        return self.finished or self.cancelled

    def fragment(self, text: str) -> None:
        if not self.closed:
            self._on_fragment(text)

    def complete(self) -> None:
        if self.closed:
            return
        self.finished = True
        if self._on_complete is not None:
            self._on_complete()

    def fail(self, message: str) -> None:
        if self.closed:
            return
        self.finished = True
        if self._on_error is not None:
            self._on_error(message)


class StreamingSession:
    """Mistral 流式对话会话。

    - start(): 同步调用，返回时新流已是唯一活动的流（需要运行中的事件循环）。
    - cancel(): 同步地丢弃当前流的句柄并请求取消任务，之后不会再有任何回调；
      底层 httpx 响应与连接在旧任务下一次被调度时才真正关闭。
      空闲时调用或重复调用都是安全的。
    - wait(): 等待当前流结束（包括被取消）。
    """

    def __init__(self, settings):
        self._settings = settings
        self._task: Optional[asyncio.Task] = None
        self._state: Optional[_StreamState] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        request: Optional[ChatRequest],
        api_key: Optional[str],
        on_fragment: Callable[[str], None],
        on_error: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> None:
        # 校验之前先取消旧流
        self.cancel()
        try:
            self._validate(request, api_key)
        except ValidationError as e:
            log.warning("Stream rejected", extra={"extra": {"code": e.code}})
            if on_error is not None:
                on_error(e.message)
            return

        state = _StreamState(on_fragment, on_error, on_complete)
        decoder = SseDecoder(on_complete=state.complete)
        loop = asyncio.get_running_loop()
        self._state = state
        self._task = loop.create_task(self._run(request.with_stream(True), api_key, decoder, state))
        log.info(
            "Stream started",
            extra={"extra": {"model": request.model, "message_count": len(request.messages)}},
        )

    def cancel(self) -> None:
        state, task = self._state, self._task
        self._state = None
        self._task = None
        if state is not None:
            state.cancelled = True
        if task is not None and not task.done():
            log.info("Cancelling active stream")
            task.cancel()

    async def wait(self) -> None:
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    @staticmethod
    def _validate(request: Optional[ChatRequest], api_key: Optional[str]) -> None:
        if request is None:
            raise ValidationError(code="NULL_REQUEST", message="Request cannot be null")
        if not api_key or not api_key.strip():
            raise ValidationError(code="MISSING_API_KEY", message="API key is not configured")
        if not api_key.isascii():
            raise ValidationError(code="INVALID_API_KEY", message="API key contains non-ASCII characters")

    async def _run(
        self,
        request: ChatRequest,
        api_key: str,
        decoder: SseDecoder,
        state: _StreamState,
    ) -> None:
        url = f"{self._settings.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                async with client.stream("POST", url, json=request.to_payload(), headers=headers) as resp:
                    if resp.status_code >= 400:
                        body = (await resp.aread()).decode("utf-8", errors="replace")
                        raise ApiError(
                            code="API_ERROR",
                            message=f"HTTP {resp.status_code}: {body}",
                            http_status=resp.status_code,
                        )
                    async for chunk in resp.aiter_text():
                        for fragment in decoder.process_chunk(chunk):
                            state.fragment(fragment)
                        if state.closed:
                            break
            if decoder.pending and not state.closed:
                # 响应体以未换行的最后一行结束
                for fragment in decoder.process_chunk("\n"):
                    state.fragment(fragment)
            state.complete()
        except asyncio.CancelledError:
            state.cancelled = True
            raise
        except httpx.RequestError as e:
            err = NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
            log.warning("Stream transport error", extra={"extra": {"error": err.message}})
            state.fail(err.message)
        except BusinessError as e:
            log.warning(
                "Stream failed",
                extra={"extra": {"code": e.code, "http_status": e.http_status, "error": e.message}},
            )
            state.fail(e.message)
        except Exception as e:
            log.exception("Stream callback failed")
            state.fail(str(e))
        finally:
            if self._task is asyncio.current_task():
                self._task = None
                self._state = None
