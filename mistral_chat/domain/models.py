"""统一的对话与结果数据模型。

本模块定义了客户端内部共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant），提交后不可变。
- ChatRequest: 发给 Mistral chat/completions 的完整请求，构造后不可变。
- ChatResult: 非流式响应解析后的统一结果。

Provider 与 Streaming 层只依赖这些模型，并负责在 API JSON 与模型之间做转换。
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TOP_P = 1.0


class ChatRole(str, Enum):
    """消息角色（与 Mistral API 的 role 字段对应）。"""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "ChatRole":
        # 未知角色按 user 处理
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.USER


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。"""

    role: ChatRole
    content: str = ""

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(ChatRole.USER, content or "")

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(ChatRole.ASSISTANT, content or "")

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(ChatRole.SYSTEM, content or "")

    @classmethod
    def placeholder(cls) -> "ChatMessage":
        """流式回答开始前发给观察者的空 assistant 消息。"""

        return cls(ChatRole.ASSISTANT, "")

    @property
    def is_user(self) -> bool:
        return self.role is ChatRole.USER

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    def __str__(self) -> str:
        return f"[{self.role.value}]: {self.content}"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ChatRequest:
    """一次完整的聊天请求。

    Controller 每次发送时都基于历史快照重新构造 ChatRequest；
    请使用 ChatRequest.build()，它会把采样参数钳制到 API 允许的范围。
    """

    model: str
    messages: Tuple[ChatMessage, ...]
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    top_p: float = DEFAULT_TOP_P
    stream: bool = False
    safe_prompt: bool = False

    @classmethod
    def build(
        cls,
        model: str,
        messages: Iterable[ChatMessage],
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        top_p: float = DEFAULT_TOP_P,
        stream: bool = False,
        safe_prompt: bool = False,
    ) -> "ChatRequest":
        return cls(
            model=model,
            messages=tuple(messages),
            temperature=_clamp(float(temperature), 0.0, 2.0),
            max_tokens=max(1, int(max_tokens)),
            top_p=_clamp(float(top_p), 0.0, 1.0),
            stream=stream,
            safe_prompt=safe_prompt,
        )

    def with_stream(self, stream: bool) -> "ChatRequest":
        return self if self.stream == stream else replace(self, stream=stream)

    def to_payload(self) -> Dict[str, Any]:
        """转换为 chat/completions 请求 JSON。"""

        return {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "stream": self.stream,
            "safe_prompt": self.safe_prompt,
        }


@dataclass
class ChatUsage:
    """API 返回的 token 统计信息。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前通常只用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次非流式调用的最终结果。

    - id / model: 服务端返回的响应 ID 与实际模型名。
    - choices: 一个或多个候选回答，可能为空。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    id: str
    model: str
    choices: List[ChatChoice] = field(default_factory=list)
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None

    @property
    def first_content(self) -> Optional[str]:
        if not self.choices:
            return None
        return self.choices[0].message.content
