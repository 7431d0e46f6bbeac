"""标识符生成 -- 注入式 ID 生成器

Coordinator 在构造时接收一个 IdGenerator，进程内只构造一次。
核心层从不解析 ID 的内部结构。
"""

from typing import Protocol

from ulid import ULID


class IdGenerator(Protocol):
    """ID 生成器接口"""

    def new_id(self) -> str:
        """返回一个全局唯一的不透明字符串"""
        ...


class UlidGenerator:
    """默认实现：ULID 格式，时间有序"""

    def new_id(self) -> str:
        return str(ULID())
