"""对话历史的保留策略。

超过上限时按先进先出淘汰最早的消息，一次性裁剪到目标数量，
避免每追加一条就触发一次裁剪。
"""

from typing import List, TypeVar

T = TypeVar("T")


def trim_history(items: List[T], max_count: int, trim_to: int) -> List[T]:
    """超限时原地删除最早的元素，返回同一个列表。

    - max_count <= 0 表示不限制，直接返回。
    - trim_to 会被钳制到 [0, max_count]。
    - 幸存元素保持原有相对顺序。
    """

    if max_count <= 0 or len(items) <= max_count:
        return items
    trim_to = max(0, min(trim_to, max_count))
    del items[: len(items) - trim_to]
    return items


def validate_retention(max_count: int, trim_to: int) -> bool:
    """检查裁剪配置是否合理（不限制时总是合理）。"""

    if max_count <= 0:
        return True
    return 0 <= trim_to <= max_count
