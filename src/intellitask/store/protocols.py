"""Store Protocol 接口定义

定义按实体类型实例化的通用 EntityStore 接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
Store 只校验 ID 非空，领域不变量由 Coordinator 负责。
"""

from collections.abc import Mapping
from typing import Protocol, TypeVar

from ..models.base import Entity

E = TypeVar("E", bound=Entity)


class EntityStore(Protocol[E]):
    """单一实体类型的 ID 键控存储接口"""

    def save(self, entity: E) -> E:
        """插入或覆盖实体，原样返回"""
        ...

    def find_by_id(self, entity_id: str) -> E | None:
        """根据 ID 查询，不存在返回 None"""
        ...

    def find_all(self) -> list[E]:
        """返回全部实体的独立副本，顺序不保证"""
        ...

    def delete_by_id(self, entity_id: str) -> bool:
        """删除实体，返回是否确实删除"""
        ...

    def replace_all(self, entities: Mapping[str, E]) -> None:
        """整体替换当前内容（仅供快照加载使用）"""
        ...

    def export_all(self) -> Mapping[str, E]:
        """导出只读视图（仅供快照保存使用）"""
        ...
