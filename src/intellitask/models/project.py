"""Project Domain Model"""

from pydantic import Field

from .base import Entity, NonEmptyStr, OptionalText, Timestamp, UniqueIdList
from .enums import Status


class Project(Entity):
    """Project 数据模型

    task_ids 不含重复项。项目不会随 Task 删除而级联更新，
    因此 task_ids 中可能存在已失效的 ID。
    """

    name: NonEmptyStr = Field(description="项目名称")
    description: OptionalText = Field(default="", description="项目描述")
    status: Status = Field(default=Status.PENDING, description="项目状态")
    created_at: Timestamp = Field(description="创建时间")
    last_modified_at: Timestamp = Field(description="最后修改时间")
    task_ids: UniqueIdList = Field(default_factory=list, description="包含的 Task ID 列表")

    def has_task(self, task_id: str) -> bool:
        return task_id in self.task_ids
