"""EntityStore 内存实现

以 dict 保存实体，所有读写都经过深拷贝：
调用方持有的对象与 Store 内部状态之间不存在可变别名。
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

from ..exceptions import ValidationError
from ..models.base import Entity
from ..validation import require_id

E = TypeVar("E", bound=Entity)


class InMemoryEntityStore(Generic[E]):
    """EntityStore 的内存实现"""

    def __init__(self, entity_type: type[E]) -> None:
        self.entity_type = entity_type
        self._entities: dict[str, E] = {}

    @property
    def kind(self) -> str:
        return self.entity_type.__name__

    def save(self, entity: E) -> E:
        """插入（ID 未出现过）或覆盖（ID 已存在）

        Raises:
            ValidationError: entity 为 None 或其 ID 为空
        """
        if entity is None:
            raise ValidationError(f"{self.kind} cannot be null")
        require_id(entity.id, f"{self.kind} ID")
        self._entities[entity.id] = entity.model_copy(deep=True)
        return entity

    def find_by_id(self, entity_id: str) -> E | None:
        require_id(entity_id, f"{self.kind} ID")
        entity = self._entities.get(entity_id)
        if entity is None:
            return None
        return entity.model_copy(deep=True)

    def find_all(self) -> list[E]:
        return [entity.model_copy(deep=True) for entity in self._entities.values()]

    def delete_by_id(self, entity_id: str) -> bool:
        require_id(entity_id, f"{self.kind} ID")
        return self._entities.pop(entity_id, None) is not None

    def replace_all(self, entities: Mapping[str, E]) -> None:
        """丢弃当前内容并安装给定集合

        新集合先完整构建，校验失败时原内容保持不变。
        """
        replacement: dict[str, E] = {}
        for entity_id, entity in entities.items():
            require_id(entity_id, f"{self.kind} ID")
            if entity.id != entity_id:
                raise ValidationError(
                    f"{self.kind} keyed as {entity_id!r} carries id {entity.id!r}"
                )
            replacement[entity_id] = entity.model_copy(deep=True)
        self._entities = replacement

    def export_all(self) -> Mapping[str, E]:
        return MappingProxyType(
            {entity_id: entity.model_copy(deep=True) for entity_id, entity in self._entities.items()}
        )

    def count(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities
