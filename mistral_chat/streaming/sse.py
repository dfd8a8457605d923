"""Server-Sent Events（SSE）解码器。

把网络层任意切分的文本/字节块还原成完整的行，再从 ``data: `` 帧中
提取 ``choices[0].delta.content`` 作为内容片段。

- 跨块的不完整行保留在缓冲区，等下一块到达后再处理。
- ``data: [DONE]`` 表示流结束，完成信号最多触发一次。
- 解析失败的帧（流式传输中常见的半截 JSON）静默跳过，只在 DEBUG 级别记录。
"""

import codecs
import json
from typing import Any, Callable, Iterator, List, Optional, Union

from mistral_chat.infrastructure.logging.logger import get_logger

SSE_DATA_PREFIX = "data: "
SSE_DONE_MARKER = "[DONE]"

log = get_logger("sse")


class SseDecoder:
    """有状态的 SSE 行解码器。

    - on_complete: 收到终止标记时调用（每个流最多一次）。
    - on_diagnostic: 可选的低级别诊断回调，接收被跳过帧的说明。

    复用同一个实例解码新的流之前必须调用 reset()。
    """

    def __init__(
        self,
        on_complete: Optional[Callable[[], None]] = None,
        on_diagnostic: Optional[Callable[[str], None]] = None,
    ):
        self._on_complete = on_complete
        self._on_diagnostic = on_diagnostic
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def pending(self) -> str:
        """尚未凑成完整行的缓冲文本。"""
        return self._buffer

    def process_chunk(self, chunk: Union[str, bytes, None]) -> Iterator[str]:
        """处理一块原始数据，返回本块可产出的内容片段。

        缓冲区在调用时立即更新；返回的迭代器惰性地解析各行。
        """

        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        if not chunk:
            return iter(())

        self._buffer += chunk
        lines = self._buffer.split("\n")
        if self._buffer.endswith("\n"):
            self._buffer = ""
        else:
            self._buffer = lines.pop()
        return self._iter_fragments(lines)

    def reset(self) -> None:
        self._buffer = ""
        self._utf8.reset()
        self._completed = False

    def _iter_fragments(self, lines: List[str]) -> Iterator[str]:
        for line in lines:
            if self._completed:
                return
            if not line.strip():
                continue
            if not line.startswith(SSE_DATA_PREFIX):
                continue
            data = line[len(SSE_DATA_PREFIX):].strip()
            if data == SSE_DONE_MARKER:
                self._complete()
                return
            content = self._extract_content(data)
            if content:
                yield content

    def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        if self._on_complete is not None:
            self._on_complete()

    def _extract_content(self, data: str) -> Optional[str]:
        try:
            payload: Any = json.loads(data)
        except json.JSONDecodeError as e:
            self._diagnose(f"Partial JSON chunk: {e}")
            return None
        try:
            content = payload["choices"][0]["delta"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError):
            self._diagnose("Unexpected frame shape")
            return None
        if content is None:
            return None
        if not isinstance(content, str):
            self._diagnose(f"Non-text delta content: {type(content).__name__}")
            return None
        return content

    def _diagnose(self, message: str) -> None:
        log.debug(message)
        if self._on_diagnostic is not None:
            self._on_diagnostic(message)
