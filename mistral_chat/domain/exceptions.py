"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError。
Provider / Streaming 层内部抛出这些异常，并在各自的边界处转换为
Result 或 on_error 回调，不会泄漏给 ChatController 的调用方。
"""

from typing import Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_API_KEY"）。
        message: 用户可读错误信息。
        http_status: 传输层返回的 HTTP 状态码；非 HTTP 错误为 None。
        extra: 其他补充字段（例如 model、url 等）。
    """

    kind = "validation"

    def __init__(self, code: str, message: str, http_status: Optional[int] = None, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """参数或配置校验失败（在任何网络 I/O 之前）。"""

    kind = "validation"


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""

    kind = "transport"


class ApiError(BusinessError):
    """服务端返回非 2xx 状态码时抛出。"""

    kind = "transport"


class DecodeError(BusinessError):
    """响应体无法解析为预期的 JSON 结构。"""

    kind = "decode"
