"""进程重启持久性测试

测试内容：
1. save() -> 新的空 Store -> load() 还原全部六类实体（ID 与字段值一致）
2. 悬空引用在重启后保持原样
"""

from datetime import timedelta
from pathlib import Path

from intellitask.coordinator import Coordinator
from intellitask.models import EntityKind, Priority, Status
from intellitask.snapshot import LoadOutcome, SnapshotManager
from intellitask.store import StoreGroup, create_store_group


def _restart(snapshot_path: Path) -> StoreGroup:
    """模拟进程重启：新建空 Store 并从快照加载"""
    fresh = create_store_group()
    report = SnapshotManager(fresh, snapshot_path).load()
    assert report.outcome == LoadOutcome.LOADED
    return fresh


class TestRoundTrip:
    """快照往返"""

    def test_labeled_high_priority_task_survives_restart(self, coordinator, snapshot, snapshot_path):
        """创建 User + HIGH Task + Label 并绑定 -> 保存 -> 重启 -> 数据完整"""
        coordinator.create_user("alice", "alice@example.com")
        task = coordinator.create_task("准备发布", Priority.HIGH)
        label = coordinator.create_label("工作")
        coordinator.attach_label(label.id, task.id, EntityKind.TASK)
        original = coordinator.get_task(task.id)

        snapshot.save()
        restored = _restart(snapshot_path)

        reloaded = restored.tasks.find_by_id(task.id)
        assert reloaded is not None
        assert reloaded.label_ids == original.label_ids == [label.id]
        assert reloaded.priority == Priority.HIGH
        assert restored.labels.find_by_id(label.id).name == "工作"
        assert [u.username for u in restored.users.find_all()] == ["alice"]

    def test_all_entity_types_identical(self, coordinator, clock, stores, snapshot, snapshot_path):
        coordinator.create_user("bob", "bob@example.com")
        task = coordinator.create_task("t", Priority.LOW)
        coordinator.mark_task_completed(task.id)
        note = coordinator.create_note("n", None)
        label = coordinator.create_label("l")
        coordinator.attach_label(label.id, note.id, EntityKind.NOTE)
        project = coordinator.create_project("p", "desc")
        coordinator.add_task_to_project(project.id, task.id)
        coordinator.update_project_status(project.id, Status.IN_PROGRESS)
        reminder = coordinator.create_reminder(
            "r", clock.current + timedelta(hours=2), note.id, EntityKind.NOTE
        )
        coordinator.dismiss_reminder(reminder.id)

        snapshot.save()
        restored = _restart(snapshot_path)

        for (name, before), (_, after) in zip(stores.sections(), restored.sections(), strict=True):
            before_all = before.export_all()
            after_all = after.export_all()
            assert set(before_all) == set(after_all), name
            for entity_id, entity in before_all.items():
                assert entity.same_fields(after_all[entity_id]), (name, entity_id)

    def test_dangling_references_preserved(self, coordinator, snapshot, snapshot_path):
        task = coordinator.create_task("x")
        project = coordinator.create_project("p")
        coordinator.add_task_to_project(project.id, task.id)
        coordinator.create_reminder("r", project.created_at, task.id, EntityKind.TASK)
        coordinator.delete_task(task.id)

        snapshot.save()
        restored = _restart(snapshot_path)

        assert restored.projects.find_by_id(project.id).task_ids == [task.id]
        assert restored.reminders.find_all()[0].associated_entity_id == task.id

        reloaded = Coordinator(restored)
        assert reloaded.get_tasks_in_project(project.id) == []
