"""CLI 入口模块 -- python -m intellitask <command>

支持的命令：
  summary        加载快照并输出各类实体数量
  due-reminders  列出当前已到期且未忽略的提醒
"""

import sys

import structlog

from .config import get_data_file
from .coordinator import Coordinator
from .exceptions import IntelliTaskError
from .logging_config import setup_logging
from .snapshot import LoadOutcome, SnapshotManager
from .store import create_store_group

log = structlog.get_logger()

_COMMANDS = {
    "summary": "加载快照并输出各类实体数量",
    "due-reminders": "列出当前已到期且未忽略的提醒",
}


def _usage() -> None:
    print("用法: python -m intellitask <command>")
    print("命令:")
    for name, help_text in _COMMANDS.items():
        print(f"  {name:<14} {help_text}")


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        _usage()
        sys.exit(1)

    command = sys.argv[1]
    if command not in _COMMANDS:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(_COMMANDS)}")
        sys.exit(1)

    setup_logging()
    try:
        run(command)
    except IntelliTaskError as e:
        print(f"错误: {e.message}")
        sys.exit(1)


def run(command: str) -> None:
    """按进程生命周期执行命令：启动时 load()，结束前 save()"""
    stores = create_store_group()
    snapshot = SnapshotManager(stores, get_data_file())
    coordinator = Coordinator(stores)

    print(f"快照文件: {snapshot.path}")
    report = snapshot.load()
    if report.outcome == LoadOutcome.FRESH:
        print("快照文件不存在，以空数据启动")
    elif report.outcome == LoadOutcome.CORRUPT:
        print(f"快照文件已损坏，以空数据启动: {report.detail}")

    if command == "summary":
        for name, store in stores.sections():
            print(f"  {name:<10} {store.count()}")
    elif command == "due-reminders":
        due = coordinator.get_due_reminders()
        if not due:
            print("没有到期的提醒")
        for reminder in sorted(due, key=lambda r: r.reminder_time):
            print(
                f"  [{reminder.reminder_time.isoformat()}] {reminder.message} "
                f"({reminder.associated_entity_type.value} {reminder.associated_entity_id})"
            )

    # 损坏的快照不覆盖，保留原文件以便人工恢复
    if report.outcome == LoadOutcome.CORRUPT:
        log.warning("snapshot_save_skipped", path=str(snapshot.path))
        return
    snapshot.save()


if __name__ == "__main__":
    main()
