"""IntelliTask -- 个人效率追踪器核心

多实体内存存储 + 跨实体引用一致性 + 全量快照持久化。
"""

from .coordinator import Coordinator
from .exceptions import (
    AssociationError,
    IntelliTaskError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .ids import IdGenerator, UlidGenerator
from .snapshot import LoadOutcome, LoadReport, SnapshotManager
from .store import StoreGroup, create_store_group

__all__ = [
    "Coordinator",
    "StoreGroup",
    "create_store_group",
    "SnapshotManager",
    "LoadOutcome",
    "LoadReport",
    "IdGenerator",
    "UlidGenerator",
    "IntelliTaskError",
    "ValidationError",
    "NotFoundError",
    "AssociationError",
    "PersistenceError",
]
