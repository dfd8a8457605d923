"""观察者事件钩子。"""

from typing import Any, Callable, List

from mistral_chat.infrastructure.logging.logger import get_logger

log = get_logger("chat.events")


class EventHook:
    """按订阅顺序同步分发事件；单个监听器抛异常只记录日志。"""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[..., Any]] = []

    def subscribe(self, listener: Callable[..., Any]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception:
                log.exception(f"Listener for '{self.name}' failed")

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
