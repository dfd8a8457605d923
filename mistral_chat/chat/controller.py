"""对话控制器。

ChatController 管理一段逻辑对话：追加消息、选择流式或非流式调用、
应用历史裁剪，并通过三个事件钩子通知上层：

- turn_added(turn, is_user): 新消息（含流式回答开始时的空占位消息）。
- streaming_updated(text): 流式回答的累计全文（不是增量），观察者直接替换显示。
- error(message): 任意失败；控制器随后回到 IDLE，可以继续使用。

同一个控制器任何时刻最多只有一个进行中的流；新的 send() 会先取消旧流，
被取代的流不会再向观察者发出任何事件。
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from mistral_chat.chat.events import EventHook
from mistral_chat.chat.history import trim_history
from mistral_chat.domain.models import ChatMessage, ChatRequest
from mistral_chat.infrastructure.logging.logger import get_logger
from mistral_chat.providers.base import CompletionClient, StreamingClient
from mistral_chat.providers.mistral_client import MistralClient
from mistral_chat.providers.registry import resolve_model
from mistral_chat.streaming.session import StreamingSession

logger = get_logger("chat")

NO_RESPONSE_MESSAGE = "No response received from Mistral API"


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ChatController:
    def __init__(
        self,
        settings,
        client: Optional[CompletionClient] = None,
        streaming: Optional[StreamingClient] = None,
    ):
        self._settings = settings
        self._client = client if client is not None else MistralClient(settings)
        self._streaming = streaming if streaming is not None else StreamingSession(settings)
        self._history: List[ChatMessage] = []
        self._state = ChatState.IDLE
        self._disposed = False
        # 每次 send/cancel 递增；过期回调据此丢弃
        self._generation = 0

        self.turn_added = EventHook("turn_added")
        self.streaming_updated = EventHook("streaming_updated")
        self.error = EventHook("error")

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._history)

    @property
    def history_count(self) -> int:
        return len(self._history)

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    async def send(
        self,
        user_text: str,
        model: Optional[str] = None,
        streaming: Optional[bool] = None,
    ) -> None:
        """发送一条用户消息并等待本轮回答结束（完成、失败或被取代）。"""

        if self._disposed:
            logger.warning("send() called on disposed controller")
            return
        if not user_text or not user_text.strip():
            return

        use_streaming = self._settings.streaming if streaming is None else streaming
        self._streaming.cancel()
        self._generation += 1
        generation = self._generation

        user_turn = ChatMessage.user(user_text)
        self._append(user_turn)
        self.turn_added.emit(user_turn, True)

        request = self._build_request(model, use_streaming)
        self._state = ChatState.AWAITING_RESPONSE
        self._log(
            logging.INFO,
            "Dispatching request",
            generation=generation,
            model=request.model,
            streaming=use_streaming,
            message_count=len(request.messages),
        )
        if use_streaming:
            await self._send_streaming(request, generation)
        else:
            await self._send_buffered(request, generation)

    def clear(self) -> None:
        """清空历史；不影响进行中的流。"""

        self._history.clear()

    def cancel(self) -> None:
        """取消当前回答，丢弃未提交的内容，不发出任何事件。"""

        self._streaming.cancel()
        self._generation += 1
        self._state = ChatState.IDLE

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.cancel()
        self._history.clear()
        self.turn_added.clear()
        self.streaming_updated.clear()
        self.error.clear()

    async def _send_streaming(self, request: ChatRequest, generation: int) -> None:
        content = ""
        self.turn_added.emit(ChatMessage.placeholder(), False)

        def on_fragment(fragment: str) -> None:
            nonlocal content
            if generation != self._generation:
                return
            content += fragment
            self.streaming_updated.emit(content)

        def on_complete() -> None:
            if generation != self._generation:
                return
            self._append(ChatMessage.assistant(content))
            self._state = ChatState.IDLE
            self._log(logging.INFO, "Stream committed", generation=generation, length=len(content))

        def on_error(message: str) -> None:
            if generation != self._generation:
                return
            self._state = ChatState.IDLE
            self._log(logging.WARNING, "Stream failed", generation=generation, error=message)
            self.streaming_updated.emit(f"{content}Error: {message}")
            self.error.emit(message)

        self._streaming.start(
            request,
            self._settings.api_key,
            on_fragment,
            on_error=on_error,
            on_complete=on_complete,
        )
        await self._streaming.wait()

    async def _send_buffered(self, request: ChatRequest, generation: int) -> None:
        try:
            result = await self._client.complete(request)
        except Exception as e:
            logger.exception("Completion client raised")
            if generation == self._generation:
                self._fail(str(e))
            return

        if generation != self._generation:
            self._log(logging.INFO, "Discarding superseded response", generation=generation)
            return
        if result.is_failure:
            self._fail(result.error)
            return
        if not result.value.choices:
            self._fail(NO_RESPONSE_MESSAGE)
            return

        turn = ChatMessage.assistant(result.value.first_content)
        self._append(turn)
        self._state = ChatState.IDLE
        self.turn_added.emit(turn, False)

    def _fail(self, message: str) -> None:
        self._state = ChatState.IDLE
        self._log(logging.WARNING, "Request failed", error=message)
        self.error.emit(message)

    def _append(self, turn: ChatMessage) -> None:
        self._history.append(turn)
        before = len(self._history)
        trim_history(
            self._history,
            self._settings.max_history_messages,
            self._settings.history_trim_count,
        )
        if len(self._history) != before:
            self._log(logging.INFO, "Trimmed history", removed=before - len(self._history))

    def _build_request(self, model: Optional[str], use_streaming: bool) -> ChatRequest:
        messages = list(self._history)
        if self._settings.system_prompt:
            messages.insert(0, ChatMessage.system(self._settings.system_prompt))
        return ChatRequest.build(
            model=resolve_model(model or self._settings.default_model),
            messages=messages,
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
            top_p=self._settings.top_p,
            stream=use_streaming,
            safe_prompt=self._settings.safe_prompt,
        )

    @staticmethod
    def _log(level: int, message: str, **fields: Any) -> None:
        payload: Dict[str, Any] = dict(fields)
        logger.log(level, message, extra={"extra": payload})
