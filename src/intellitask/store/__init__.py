"""IntelliTask Store -- 内存实体存储

提供工厂函数创建六类实体的 Store 实例组。
"""

from collections.abc import Iterator

from ..models import Label, Note, Project, Reminder, Task, User
from .memory_store import InMemoryEntityStore
from .protocols import EntityStore

# 快照文档中的分节名称，顺序即保存顺序
SECTION_NAMES: tuple[str, ...] = ("users", "tasks", "notes", "projects", "reminders", "labels")


class StoreGroup:
    """Store 实例组 -- 每种实体类型一个 Store，由 Coordinator 独占使用"""

    def __init__(self) -> None:
        self.users: InMemoryEntityStore[User] = InMemoryEntityStore(User)
        self.tasks: InMemoryEntityStore[Task] = InMemoryEntityStore(Task)
        self.notes: InMemoryEntityStore[Note] = InMemoryEntityStore(Note)
        self.projects: InMemoryEntityStore[Project] = InMemoryEntityStore(Project)
        self.reminders: InMemoryEntityStore[Reminder] = InMemoryEntityStore(Reminder)
        self.labels: InMemoryEntityStore[Label] = InMemoryEntityStore(Label)

    def sections(self) -> Iterator[tuple[str, InMemoryEntityStore]]:
        """按快照分节名称遍历 (name, store)"""
        for name in SECTION_NAMES:
            yield name, getattr(self, name)

    def is_empty(self) -> bool:
        return all(store.count() == 0 for _, store in self.sections())

    def clear(self) -> None:
        for _, store in self.sections():
            store.replace_all({})


def create_store_group() -> StoreGroup:
    """创建一组空的 Store 实例"""
    return StoreGroup()


__all__ = [
    "SECTION_NAMES",
    "StoreGroup",
    "create_store_group",
    "EntityStore",
    "InMemoryEntityStore",
]
