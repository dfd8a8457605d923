"""流式传输层。

- sse: SseDecoder，把 SSE 文本流解码为内容片段。
- session: StreamingSession，管理单个进行中的流式请求。
"""

from mistral_chat.streaming.session import StreamingSession
from mistral_chat.streaming.sse import SseDecoder

__all__ = ["SseDecoder", "StreamingSession"]
