"""Result：成功值或失败描述的显式返回类型。

用于替代“失败时返回 None”的写法。失败分支携带：

- error: 用户可读的错误信息。
- kind: 错误类别（校验 / 传输 / 解码），便于上层区分处理。
- exception: 可选的原始异常。
- http_status: 可选的 HTTP 状态码（仅传输错误）。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from mistral_chat.domain.exceptions import BusinessError

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    DECODE = "decode"


@dataclass(frozen=True)
class Result(Generic[T]):
    is_success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    exception: Optional[BaseException] = None
    http_status: Optional[int] = None

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        if value is None:
            raise ValueError("Result.success requires a value")
        return cls(is_success=True, value=value)

    @classmethod
    def failure(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.VALIDATION,
        exception: Optional[BaseException] = None,
        http_status: Optional[int] = None,
    ) -> "Result[T]":
        return cls(
            is_success=False,
            error=error,
            kind=kind,
            exception=exception,
            http_status=http_status,
        )

    @classmethod
    def from_error(cls, exc: BusinessError) -> "Result[T]":
        """把业务异常转换为失败的 Result，保留状态码与原始异常。"""

        return cls.failure(
            exc.message,
            kind=ErrorKind(exc.kind),
            exception=exc,
            http_status=exc.http_status,
        )

    def match(self, on_success: Callable[[T], None], on_failure: Callable[[str], None]) -> None:
        if self.is_success:
            on_success(self.value)
        else:
            on_failure(self.error)

    def map(self, mapper: Callable[[T], U]) -> "Result[U]":
        """对成功值做变换；mapper 抛出的异常转换为失败。"""

        if self.is_failure:
            return Result.failure(self.error, self.kind, self.exception, self.http_status)
        try:
            return Result.success(mapper(self.value))
        except Exception as exc:
            return Result.failure(str(exc), ErrorKind.DECODE, exc)

    def value_or(self, default: T) -> T:
        return self.value if self.is_success else default
