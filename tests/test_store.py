"""InMemoryEntityStore 单元测试

测试内容：
1. save / find_by_id / delete_by_id 基本语义
2. 空 ID 校验
3. 防御性拷贝（find_all / find_by_id / export_all）
4. replace_all 整体替换
"""

import pytest
from intellitask.exceptions import ValidationError
from intellitask.models import Label, Task
from intellitask.store import SECTION_NAMES, InMemoryEntityStore, create_store_group


@pytest.fixture
def task_store() -> InMemoryEntityStore[Task]:
    return InMemoryEntityStore(Task)


class TestBasicOperations:
    """CRUD 基本语义"""

    def test_save_returns_entity_unchanged(self, task_store):
        task = Task(id="t1", description="写周报")
        assert task_store.save(task) is task

    def test_save_inserts_and_overwrites(self, task_store):
        task_store.save(Task(id="t1", description="旧描述"))
        task_store.save(Task(id="t1", description="新描述"))
        assert task_store.count() == 1
        assert task_store.find_by_id("t1").description == "新描述"

    def test_find_missing_returns_none(self, task_store):
        assert task_store.find_by_id("missing") is None

    def test_delete_reports_whether_removed(self, task_store):
        task_store.save(Task(id="t1", description="x"))
        assert task_store.delete_by_id("t1") is True
        assert task_store.delete_by_id("t1") is False
        assert "t1" not in task_store

    @pytest.mark.parametrize("bad_id", ["", "  ", None])
    def test_empty_id_rejected(self, task_store, bad_id):
        with pytest.raises(ValidationError):
            task_store.find_by_id(bad_id)
        with pytest.raises(ValidationError):
            task_store.delete_by_id(bad_id)

    def test_save_none_rejected(self, task_store):
        with pytest.raises(ValidationError):
            task_store.save(None)

    def test_kind_is_entity_type_name(self, task_store):
        assert task_store.kind == "Task"


class TestDefensiveCopies:
    """Store 内部状态不与调用方共享可变对象"""

    def test_mutating_saved_entity_does_not_leak(self, task_store):
        task = Task(id="t1", description="x")
        task_store.save(task)
        task.label_ids.append("l1")
        assert task_store.find_by_id("t1").label_ids == []

    def test_mutating_found_entity_does_not_leak(self, task_store):
        task_store.save(Task(id="t1", description="x"))
        found = task_store.find_by_id("t1")
        found.label_ids.append("l1")
        assert task_store.find_by_id("t1").label_ids == []

    def test_find_all_is_independent(self, task_store):
        task_store.save(Task(id="t1", description="x"))
        everything = task_store.find_all()
        everything[0].label_ids.append("l1")
        everything.clear()
        assert task_store.count() == 1
        assert task_store.find_by_id("t1").label_ids == []

    def test_export_all_is_read_only(self, task_store):
        task_store.save(Task(id="t1", description="x"))
        view = task_store.export_all()
        with pytest.raises(TypeError):
            view["t2"] = Task(id="t2", description="y")  # type: ignore[index]
        view["t1"].label_ids.append("l1")
        assert task_store.find_by_id("t1").label_ids == []
        assert "t2" not in task_store


class TestReplaceAll:
    """replace_all 整体替换"""

    def test_replace_discards_previous_contents(self, task_store):
        task_store.save(Task(id="old", description="x"))
        task_store.replace_all({"new": Task(id="new", description="y")})
        assert task_store.find_by_id("old") is None
        assert task_store.find_by_id("new").description == "y"

    def test_replace_with_mismatched_key_keeps_contents(self, task_store):
        task_store.save(Task(id="old", description="x"))
        with pytest.raises(ValidationError):
            task_store.replace_all({"k": Task(id="other", description="y")})
        assert task_store.find_by_id("old") is not None

    def test_replace_copies_input(self, task_store):
        source = {"t1": Task(id="t1", description="x")}
        task_store.replace_all(source)
        source["t1"].label_ids.append("l1")
        source.clear()
        assert task_store.find_by_id("t1").label_ids == []


class TestStoreGroup:
    """Store 实例组"""

    def test_sections_in_snapshot_order(self):
        group = create_store_group()
        assert [name for name, _ in group.sections()] == list(SECTION_NAMES)

    def test_clear_and_is_empty(self):
        group = create_store_group()
        assert group.is_empty()
        group.labels.save(Label(id="l1", name="工作"))
        assert not group.is_empty()
        group.clear()
        assert group.is_empty()
