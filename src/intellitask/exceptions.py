"""IntelliTask 异常体系

Coordinator 与 Store 抛出的所有领域异常均继承自 IntelliTaskError。
异常同步抛出，核心层不做任何自动重试。
"""


class IntelliTaskError(Exception):
    """IntelliTask 基础异常"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(IntelliTaskError, ValueError):
    """调用方输入不合法（空 ID、空必填文本、缺失枚举值等）

    属于调用方错误，不作为系统故障记录日志。
    """


class NotFoundError(IntelliTaskError):
    """引用的 ID 在对应 Store 中不存在"""

    def __init__(self, entity_kind: str, entity_id: str) -> None:
        """
        Args:
            entity_kind: 实体类型名称（如 "Task"）
            entity_id: 未找到的实体 ID
        """
        super().__init__(f"{entity_kind} not found: {entity_id}")
        self.entity_kind = entity_kind
        self.entity_id = entity_id


class AssociationError(IntelliTaskError):
    """尝试移除不存在的关联（如解绑未关联的 Label）"""


class PersistenceError(IntelliTaskError):
    """快照文件无法读取或写入

    保存失败不会回滚内存状态。
    """

    def __init__(self, message: str, path: str, original_error: Exception | None = None) -> None:
        """
        Args:
            message: 错误描述
            path: 快照文件路径
            original_error: 原始异常
        """
        super().__init__(f"{message}: {path}")
        self.path = path
        self.original_error = original_error
