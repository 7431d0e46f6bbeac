"""实体公共基类与字段类型

所有实体以不可变的 id 作为身份：同类型实体 id 相同即视为同一实体，
与字段内容无关。更新一律通过 evolve() 生成新实例并重新校验。
"""

from datetime import UTC, datetime
from typing import Annotated, Any, Self

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty or blank")
    return value


def as_aware(value: datetime) -> datetime:
    # 无时区的时间统一按 UTC 解释，保证比较时不混用 naive/aware
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _unique_ids(values: list[str]) -> list[str]:
    # 保持首次出现的顺序去重
    return list(dict.fromkeys(values))


NonEmptyStr = Annotated[str, AfterValidator(_not_blank)]
OptionalText = Annotated[str, BeforeValidator(_none_to_empty)]
Timestamp = Annotated[datetime, AfterValidator(as_aware)]
UniqueIdList = Annotated[list[NonEmptyStr], AfterValidator(_unique_ids)]


def utc_now() -> datetime:
    """当前 UTC 时间"""
    return datetime.now(UTC)


class Entity(BaseModel):
    """实体基类"""

    # 未知字段视为格式错误
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr = Field(description="唯一标识，创建时分配，不可变")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def evolve(self, **changes: Any) -> Self:
        """返回应用了 changes 的新实例（完整重新校验，id 不可修改）"""
        if "id" in changes and changes["id"] != self.id:
            raise ValueError("entity id is immutable")
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def same_fields(self, other: "Entity") -> bool:
        """按字段内容比较（身份比较请用 ==）"""
        return type(other) is type(self) and self.model_dump() == other.model_dump()


class LabeledEntity(Entity):
    """可被 Label 标记的实体（Task / Note）

    label_ids 有序且去重。
    """

    label_ids: UniqueIdList = Field(default_factory=list, description="关联的 Label ID 列表")

    def has_label(self, label_id: str) -> bool:
        return label_id in self.label_ids

    def without_label(self, label_id: str) -> Self:
        return self.evolve(label_ids=[lid for lid in self.label_ids if lid != label_id])
