import asyncio
import json

import pytest

from mistral_chat.config.settings import Settings


class FakeStreamResponse:
    """模拟 httpx 流式响应；gate 不为 None 时在该位置挂起。"""

    def __init__(self, chunks, status_code=200, body=b"", gate_after=None):
        self.status_code = status_code
        self._chunks = list(chunks)
        self._body = body
        self._gate_after = gate_after
        self.gate = asyncio.Event() if gate_after is not None else None
        self.closed = False

    async def aread(self):
        return self._body

    async def aiter_text(self):
        for i, chunk in enumerate(self._chunks):
            if self.gate is not None and i == self._gate_after:
                await self.gate.wait()
            await asyncio.sleep(0)
            yield chunk


class _AsyncContext:
    def __init__(self, response):
        self._response = response

    async def __aenter__(self):
        return self._response

    async def __aexit__(self, *args):
        self._response.closed = True
        return False


@pytest.fixture
def sse_frame():
    def frame(content: str) -> str:
        payload = {"choices": [{"index": 0, "delta": {"content": content}}]}
        return f"data: {json.dumps(payload, ensure_ascii=False)}\n"

    return frame


@pytest.fixture
def stream_response():
    return FakeStreamResponse


@pytest.fixture
def settings():
    return Settings(
        api_key="test-key",
        base_url="https://api.test/v1",
        http_timeout=5.0,
        max_history_messages=50,
        history_trim_count=30,
        _env_file=None,
    )


@pytest.fixture
def fake_stream(monkeypatch):
    """替换 httpx.AsyncClient；按调用顺序依次返回给定的响应。"""

    calls = []

    def install(*responses):
        queue = list(responses)

        class Client:
            def __init__(self, *a, **kw):
                self.kwargs = kw

            async def __aenter__(self):
                return self

            async def __aexit__(self, *a):
                return False

            def stream(self, method, url, json=None, headers=None):
                calls.append({"method": method, "url": url, "json": json, "headers": headers})
                return _AsyncContext(queue.pop(0))

        monkeypatch.setattr("httpx.AsyncClient", Client)
        return calls

    return install
