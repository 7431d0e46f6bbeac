"""Reminder Domain Model

Reminder 的关联对象是 Task 或 Note 之一，使用带 kind 判别字段的联合类型表示，
非法的实体类型在类型层面无法构造。关联创建后不可修改。
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .base import Entity, NonEmptyStr, Timestamp
from .enums import EntityKind


class TaskTarget(BaseModel):
    """指向 Task 的提醒目标"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["Task"] = "Task"
    id: NonEmptyStr = Field(description="Task ID")


class NoteTarget(BaseModel):
    """指向 Note 的提醒目标"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["Note"] = "Note"
    id: NonEmptyStr = Field(description="Note ID")


ReminderTarget = Annotated[TaskTarget | NoteTarget, Field(discriminator="kind")]


def make_target(kind: EntityKind, entity_id: str) -> TaskTarget | NoteTarget:
    """根据实体类型构造提醒目标"""
    if kind == EntityKind.TASK:
        return TaskTarget(id=entity_id)
    return NoteTarget(id=entity_id)


class Reminder(Entity):
    """Reminder 数据模型

    创建时 Coordinator 会校验目标存在；此后目标被删除不会级联，
    target 可能成为悬空引用。
    """

    message: NonEmptyStr = Field(description="提醒内容")
    reminder_time: Timestamp = Field(description="提醒时间")
    target: ReminderTarget = Field(description="关联的 Task 或 Note")
    dismissed: bool = Field(default=False, description="是否已忽略")

    @property
    def associated_entity_id(self) -> str:
        return self.target.id

    @property
    def associated_entity_type(self) -> EntityKind:
        return EntityKind(self.target.kind)

    def is_due(self, as_of: datetime) -> bool:
        """未忽略且提醒时间不晚于 as_of"""
        return not self.dismissed and self.reminder_time <= as_of
