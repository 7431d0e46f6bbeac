"""IntelliTask Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .base import Entity, LabeledEntity, utc_now
from .enums import EntityKind, Priority, Status
from .label import Label
from .note import Note
from .project import Project
from .reminder import NoteTarget, Reminder, ReminderTarget, TaskTarget, make_target
from .task import Task
from .user import User

__all__ = [
    # 枚举
    "Priority",
    "Status",
    "EntityKind",
    # 基类
    "Entity",
    "LabeledEntity",
    "utc_now",
    # 实体
    "User",
    "Task",
    "Note",
    "Project",
    "Label",
    "Reminder",
    # Reminder 目标
    "TaskTarget",
    "NoteTarget",
    "ReminderTarget",
    "make_target",
]
