"""枚举定义

包含 Priority、Status、EntityKind 枚举。
Status 为扁平枚举，任意状态之间均可直接切换，不维护流转图。
"""

from enum import StrEnum


class Priority(StrEnum):
    """Task 优先级"""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NONE = "NONE"


class Status(StrEnum):
    """Task / Project 状态"""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EntityKind(StrEnum):
    """可被 Label 标记、可被 Reminder 关联的实体类型"""

    TASK = "Task"
    NOTE = "Note"
