"""快照持久化 -- 全量保存/恢复六类实体

快照文档为单个 JSON 对象，包含 users / tasks / notes / projects /
reminders / labels 六个分节，每个分节是 id -> 实体字段的映射。

加载流程：
1. 文件不存在 -> FRESH，Store 保持为空
2. 文件无法读取或解析 -> CORRUPT，Store 保持为空
3. 逐节解码（缺失的分节视为空），任一分节格式错误 -> CORRUPT
4. 全部分节解码成功后，才依次 replace_all 到各 Store
"""

import json
import os
import tempfile
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import PersistenceError
from .models import Entity, Label, Note, Project, Reminder, Task, User
from .store import SECTION_NAMES, StoreGroup

log = structlog.get_logger()

# 分节名称 -> 实体类型
SECTION_TYPES: dict[str, type[Entity]] = {
    "users": User,
    "tasks": Task,
    "notes": Note,
    "projects": Project,
    "reminders": Reminder,
    "labels": Label,
}

_SECTION_ADAPTERS: dict[str, TypeAdapter] = {
    name: TypeAdapter(dict[str, entity_type]) for name, entity_type in SECTION_TYPES.items()
}


class LoadOutcome(StrEnum):
    """快照加载结果"""

    LOADED = "LOADED"
    FRESH = "FRESH"
    CORRUPT = "CORRUPT"


class LoadReport(BaseModel):
    """快照加载报告（加载失败从不抛异常，结果在此体现）"""

    outcome: LoadOutcome = Field(description="加载结果")
    path: str = Field(description="快照文件路径")
    counts: dict[str, int] = Field(default_factory=dict, description="各分节加载的实体数量")
    detail: str = Field(default="", description="失败原因")

    @property
    def ok(self) -> bool:
        return self.outcome != LoadOutcome.CORRUPT


class SnapshotCorruptError(Exception):
    """快照内容无法解码（仅在模块内部使用，load() 会将其转换为 CORRUPT）"""


def encode_snapshot(stores: StoreGroup) -> dict[str, dict[str, Any]]:
    """将全部 Store 导出为可 JSON 序列化的文档"""
    document: dict[str, dict[str, Any]] = {}
    for name, store in stores.sections():
        document[name] = {
            entity_id: entity.model_dump(mode="json")
            for entity_id, entity in store.export_all().items()
        }
    return document


def decode_snapshot(document: Any) -> dict[str, dict[str, Entity]]:
    """解码快照文档的全部分节

    缺失或为 null 的分节视为空映射。

    Raises:
        SnapshotCorruptError: 文档不是对象，或任一分节格式错误
    """
    if not isinstance(document, Mapping):
        raise SnapshotCorruptError(
            f"snapshot root must be an object, got {type(document).__name__}"
        )

    decoded: dict[str, dict[str, Entity]] = {}
    for name in SECTION_NAMES:
        raw = document.get(name)
        if raw is None:
            decoded[name] = {}
            continue
        try:
            section = _SECTION_ADAPTERS[name].validate_python(raw)
        except PydanticValidationError as e:
            raise SnapshotCorruptError(f"section {name!r} is malformed: {e}") from e

        for entity_id, entity in section.items():
            if entity.id != entity_id:
                raise SnapshotCorruptError(
                    f"section {name!r} key {entity_id!r} does not match entity id {entity.id!r}"
                )
        decoded[name] = section

    unknown = set(document) - set(SECTION_NAMES)
    if unknown:
        log.debug("snapshot_unknown_sections", sections=sorted(unknown))
    return decoded


class SnapshotManager:
    """快照管理器 -- 进程启动时 load() 一次，退出前 save() 一次"""

    def __init__(self, stores: StoreGroup, path: str | Path) -> None:
        self._stores = stores
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self) -> Path:
        """导出全部 Store 并覆盖写入快照文件

        先写入同目录临时文件，再原子替换目标文件。
        失败时内存状态保持不变。

        Returns:
            快照文件路径

        Raises:
            PersistenceError: 文件无法写入
        """
        document = encode_snapshot(self._stores)
        tmp_name: str | None = None
        try:
            payload = json.dumps(document, ensure_ascii=False, indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            log.error("snapshot_save_failed", path=str(self._path), error=str(e))
            raise PersistenceError("failed to write snapshot", str(self._path), e) from e

        log.info(
            "snapshot_saved",
            path=str(self._path),
            counts={name: len(section) for name, section in document.items()},
        )
        return self._path

    def load(self) -> LoadReport:
        """从快照文件恢复全部 Store

        任何失败都不会抛出异常：Store 保持为空，结果通过 LoadReport 返回。
        """
        self._stores.clear()
        path = str(self._path)

        if not self._path.exists():
            log.info("snapshot_not_found", path=path)
            return LoadReport(outcome=LoadOutcome.FRESH, path=path)

        try:
            text = self._path.read_text(encoding="utf-8")
            decoded = decode_snapshot(json.loads(text))
        except (OSError, ValueError, RecursionError, SnapshotCorruptError) as e:
            log.warning("snapshot_corrupt", path=path, error=str(e))
            return LoadReport(outcome=LoadOutcome.CORRUPT, path=path, detail=str(e))

        for name, store in self._stores.sections():
            store.replace_all(decoded[name])

        counts = {name: len(section) for name, section in decoded.items()}
        log.info("snapshot_loaded", path=path, counts=counts)
        return LoadReport(outcome=LoadOutcome.LOADED, path=path, counts=counts)
