"""Task Domain Model

completed 与 status 始终保持一致：
completed=True 当且仅当 status=COMPLETED。
"""

from typing import Self

from pydantic import Field, model_validator

from .base import LabeledEntity, NonEmptyStr
from .enums import Priority, Status


class Task(LabeledEntity):
    """Task 数据模型

    字段直接构造时会校验 completed/status 一致性；
    修改请使用 with_completed() / with_status()，二者会同步另一侧。
    """

    description: NonEmptyStr = Field(description="任务描述")
    completed: bool = Field(default=False, description="是否已完成")
    priority: Priority = Field(default=Priority.NONE, description="优先级")
    status: Status = Field(default=Status.PENDING, description="当前状态")

    @model_validator(mode="after")
    def _check_completed_matches_status(self) -> Self:
        if self.completed != (self.status == Status.COMPLETED):
            raise ValueError(
                f"completed={self.completed} is inconsistent with status={self.status}"
            )
        return self

    def with_completed(self, completed: bool) -> Self:
        """设置完成标记并同步 status

        标记完成 -> COMPLETED；取消完成且原状态为 COMPLETED -> PENDING；
        其余情况保持原状态。
        """
        if completed:
            status = Status.COMPLETED
        elif self.status == Status.COMPLETED:
            status = Status.PENDING
        else:
            status = self.status
        return self.evolve(completed=completed, status=status)

    def with_status(self, status: Status) -> Self:
        """设置状态并同步 completed"""
        return self.evolve(status=status, completed=status == Status.COMPLETED)
