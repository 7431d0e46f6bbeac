"""测试配置 -- 共享 fixture"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from intellitask.coordinator import Coordinator
from intellitask.snapshot import SnapshotManager
from intellitask.store import StoreGroup, create_store_group


class SequentialIdGenerator:
    """可预测的 ID 生成器：id-0001, id-0002, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = 0

    def new_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter:04d}"


class ManualClock:
    """手动推进的时钟"""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> ManualClock:
    """固定起点的时钟：2025-01-01 09:00 UTC"""
    return ManualClock(datetime(2025, 1, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def stores() -> StoreGroup:
    """空的 Store 实例组"""
    return create_store_group()


@pytest.fixture
def coordinator(stores: StoreGroup, clock: ManualClock) -> Coordinator:
    """使用顺序 ID 与手动时钟的 Coordinator"""
    return Coordinator(stores, id_generator=SequentialIdGenerator(), clock=clock)


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    """临时快照文件路径（文件尚不存在）"""
    return tmp_path / "data" / "intellitask_data.json"


@pytest.fixture
def snapshot(stores: StoreGroup, snapshot_path: Path) -> SnapshotManager:
    return SnapshotManager(stores, snapshot_path)
