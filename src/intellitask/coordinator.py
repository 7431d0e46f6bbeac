"""Coordinator -- 跨实体业务编排

所有跨实体的知识都集中在这里：
1. 实体的工厂方法（分配 ID、填充默认值）与具名更新操作
2. Label 与 Task / Note 的绑定、解绑与级联删除
3. Project 与 Task 的成员关系
4. Reminder 目标存在性校验与到期查询
5. 引用列表解析（悬空 ID 静默丢弃）

Store 之间互不调用，也不调用 Coordinator。
Task / Note / Project 的删除不做级联，悬空引用在读取时过滤。
"""

from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

import structlog

from .exceptions import AssociationError, NotFoundError, ValidationError
from .ids import IdGenerator, UlidGenerator
from .models import (
    EntityKind,
    Label,
    LabeledEntity,
    Note,
    Priority,
    Project,
    Reminder,
    Status,
    Task,
    User,
    make_target,
    utc_now,
)
from .models.base import Entity, as_aware
from .store import StoreGroup
from .store.memory_store import InMemoryEntityStore
from .validation import (
    optional_text,
    require_datetime,
    require_enum,
    require_id,
    require_text,
)

log = structlog.get_logger()

E = TypeVar("E", bound=Entity)


class Coordinator:
    """跨实体协调服务

    Args:
        stores: 六类实体的 Store 实例组
        id_generator: ID 生成器，默认 ULID
        clock: 返回当前时间的函数，默认 UTC 当前时间
    """

    def __init__(
        self,
        stores: StoreGroup,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._stores = stores
        self._ids = id_generator or UlidGenerator()
        self._clock = clock or utc_now

    @property
    def stores(self) -> StoreGroup:
        return self._stores

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return as_aware(self._clock())

    @staticmethod
    def _require(store: InMemoryEntityStore[E], entity_id: str) -> E:
        """查询实体，不存在时抛出 NotFoundError"""
        require_id(entity_id, f"{store.kind} ID")
        entity = store.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(store.kind, entity_id)
        return entity

    def _labeled_store(self, kind: EntityKind | str) -> InMemoryEntityStore:
        resolved = require_enum(kind, EntityKind, "entity kind")
        if resolved == EntityKind.TASK:
            return self._stores.tasks
        return self._stores.notes

    @staticmethod
    def _build(entity_type: type[E], **fields) -> E:
        """构造实体，将 pydantic 校验错误转换为 ValidationError"""
        try:
            return entity_type.model_validate(fields)
        except ValueError as e:
            raise ValidationError(f"invalid {entity_type.__name__}: {e}") from e

    @staticmethod
    def _evolve(entity: E, **changes) -> E:
        try:
            return entity.evolve(**changes)
        except ValueError as e:
            raise ValidationError(f"invalid {type(entity).__name__} update: {e}") from e

    def _touch_changes(self, entity: Entity, **changes) -> dict:
        """Note / Project 的修改附带刷新 last_modified_at"""
        if isinstance(entity, (Note, Project)):
            changes["last_modified_at"] = self._now()
        return changes

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    def create_user(self, username: str, email: str) -> User:
        """创建用户

        Raises:
            ValidationError: username / email 为空，或 username 已被占用
        """
        require_text(username, "username")
        require_text(email, "email")
        if self.get_user_by_username(username) is not None:
            raise ValidationError(f"username {username!r} already exists")

        user = self._build(User, id=self._ids.new_id(), username=username, email=email)
        self._stores.users.save(user)
        log.info("user_created", user_id=user.id, username=username)
        return user

    def get_user(self, user_id: str) -> User | None:
        require_id(user_id, "User ID")
        return self._stores.users.find_by_id(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        require_text(username, "username")
        for user in self._stores.users.find_all():
            if user.username == username:
                return user
        return None

    def list_users(self) -> list[User]:
        return self._stores.users.find_all()

    def update_username(self, user_id: str, new_username: str) -> User:
        """修改用户名，新用户名不得被其他用户占用"""
        require_text(new_username, "new username")
        user = self._require(self._stores.users, user_id)
        existing = self.get_user_by_username(new_username)
        if existing is not None and existing.id != user.id:
            raise ValidationError(f"username {new_username!r} is already taken by another user")

        updated = self._evolve(user, username=new_username)
        self._stores.users.save(updated)
        log.info("user_updated", user_id=user_id, field="username")
        return updated

    def update_email(self, user_id: str, new_email: str) -> User:
        require_text(new_email, "new email")
        user = self._require(self._stores.users, user_id)
        updated = self._evolve(user, email=new_email)
        self._stores.users.save(updated)
        log.info("user_updated", user_id=user_id, field="email")
        return updated

    def delete_user(self, user_id: str) -> bool:
        deleted = self._stores.users.delete_by_id(user_id)
        log.info("user_deleted", user_id=user_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Task
    # ------------------------------------------------------------------

    def create_task(self, description: str, priority: Priority | str = Priority.NONE) -> Task:
        """创建任务，默认状态 PENDING、未完成

        Args:
            description: 任务描述（非空）
            priority: 优先级，接受枚举或其符号名

        Returns:
            新创建的 Task
        """
        require_text(description, "task description")
        resolved = require_enum(priority, Priority, "priority")

        task = self._build(
            Task,
            id=self._ids.new_id(),
            description=description,
            priority=resolved,
            status=Status.PENDING,
            completed=False,
        )
        self._stores.tasks.save(task)
        log.info("task_created", task_id=task.id, priority=resolved.value)
        return task

    def get_task(self, task_id: str) -> Task | None:
        require_id(task_id, "Task ID")
        return self._stores.tasks.find_by_id(task_id)

    def list_tasks(self) -> list[Task]:
        return self._stores.tasks.find_all()

    def get_tasks_by_status(self, status: Status | str) -> list[Task]:
        resolved = require_enum(status, Status, "status")
        return [task for task in self._stores.tasks.find_all() if task.status == resolved]

    def get_tasks_by_priority(self, priority: Priority | str) -> list[Task]:
        resolved = require_enum(priority, Priority, "priority")
        return [task for task in self._stores.tasks.find_all() if task.priority == resolved]

    def update_task_description(self, task_id: str, new_description: str) -> Task:
        require_text(new_description, "new description")
        task = self._require(self._stores.tasks, task_id)
        updated = self._evolve(task, description=new_description)
        self._stores.tasks.save(updated)
        log.info("task_updated", task_id=task_id, field="description")
        return updated

    def update_task_priority(self, task_id: str, new_priority: Priority | str) -> Task:
        resolved = require_enum(new_priority, Priority, "priority")
        task = self._require(self._stores.tasks, task_id)
        updated = self._evolve(task, priority=resolved)
        self._stores.tasks.save(updated)
        log.info("task_updated", task_id=task_id, field="priority", value=resolved.value)
        return updated

    def update_task_status(self, task_id: str, new_status: Status | str) -> Task:
        """设置任务状态，completed 随之同步（任意状态间均可切换）"""
        resolved = require_enum(new_status, Status, "status")
        task = self._require(self._stores.tasks, task_id)
        updated = task.with_status(resolved)
        self._stores.tasks.save(updated)
        log.info(
            "task_status_changed",
            task_id=task_id,
            from_status=task.status.value,
            to_status=resolved.value,
        )
        return updated

    def mark_task_completed(self, task_id: str, completed: bool = True) -> Task:
        """设置完成标记，status 随之同步

        取消完成时，仅当原状态为 COMPLETED 才回退为 PENDING。
        """
        if not isinstance(completed, bool):
            raise ValidationError("completed flag must be a boolean")
        task = self._require(self._stores.tasks, task_id)
        updated = task.with_completed(completed)
        self._stores.tasks.save(updated)
        log.info(
            "task_status_changed",
            task_id=task_id,
            from_status=task.status.value,
            to_status=updated.status.value,
        )
        return updated

    def delete_task(self, task_id: str) -> bool:
        """删除任务

        不级联到引用它的 Project 与 Reminder，二者可能留下悬空引用。
        """
        deleted = self._stores.tasks.delete_by_id(task_id)
        log.info("task_deleted", task_id=task_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Note
    # ------------------------------------------------------------------

    def create_note(self, title: str, content: str | None = None) -> Note:
        """创建笔记，content 为 None 时视为空字符串"""
        require_text(title, "note title")
        now = self._now()
        note = self._build(
            Note,
            id=self._ids.new_id(),
            title=title,
            content=optional_text(content),
            created_at=now,
            last_modified_at=now,
        )
        self._stores.notes.save(note)
        log.info("note_created", note_id=note.id)
        return note

    def get_note(self, note_id: str) -> Note | None:
        require_id(note_id, "Note ID")
        return self._stores.notes.find_by_id(note_id)

    def list_notes(self) -> list[Note]:
        return self._stores.notes.find_all()

    def update_note_title(self, note_id: str, new_title: str) -> Note:
        require_text(new_title, "new title")
        note = self._require(self._stores.notes, note_id)
        updated = self._evolve(note, **self._touch_changes(note, title=new_title))
        self._stores.notes.save(updated)
        log.info("note_updated", note_id=note_id, field="title")
        return updated

    def update_note_content(self, note_id: str, new_content: str | None) -> Note:
        note = self._require(self._stores.notes, note_id)
        updated = self._evolve(
            note, **self._touch_changes(note, content=optional_text(new_content))
        )
        self._stores.notes.save(updated)
        log.info("note_updated", note_id=note_id, field="content")
        return updated

    def delete_note(self, note_id: str) -> bool:
        """删除笔记（不级联到 Reminder）"""
        deleted = self._stores.notes.delete_by_id(note_id)
        log.info("note_deleted", note_id=note_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    def create_project(self, name: str, description: str | None = None) -> Project:
        require_text(name, "project name")
        now = self._now()
        project = self._build(
            Project,
            id=self._ids.new_id(),
            name=name,
            description=optional_text(description),
            status=Status.PENDING,
            created_at=now,
            last_modified_at=now,
        )
        self._stores.projects.save(project)
        log.info("project_created", project_id=project.id)
        return project

    def get_project(self, project_id: str) -> Project | None:
        require_id(project_id, "Project ID")
        return self._stores.projects.find_by_id(project_id)

    def list_projects(self) -> list[Project]:
        return self._stores.projects.find_all()

    def update_project_name(self, project_id: str, new_name: str) -> Project:
        require_text(new_name, "new project name")
        project = self._require(self._stores.projects, project_id)
        updated = self._evolve(project, **self._touch_changes(project, name=new_name))
        self._stores.projects.save(updated)
        log.info("project_updated", project_id=project_id, field="name")
        return updated

    def update_project_description(self, project_id: str, new_description: str | None) -> Project:
        project = self._require(self._stores.projects, project_id)
        updated = self._evolve(
            project,
            **self._touch_changes(project, description=optional_text(new_description)),
        )
        self._stores.projects.save(updated)
        log.info("project_updated", project_id=project_id, field="description")
        return updated

    def update_project_status(self, project_id: str, new_status: Status | str) -> Project:
        resolved = require_enum(new_status, Status, "status")
        project = self._require(self._stores.projects, project_id)
        updated = self._evolve(project, **self._touch_changes(project, status=resolved))
        self._stores.projects.save(updated)
        log.info("project_updated", project_id=project_id, field="status", value=resolved.value)
        return updated

    def delete_project(self, project_id: str) -> bool:
        deleted = self._stores.projects.delete_by_id(project_id)
        log.info("project_deleted", project_id=project_id, deleted=deleted)
        return deleted

    def add_task_to_project(self, project_id: str, task_id: str) -> Project:
        """将任务加入项目

        任务已在项目中时静默成功，返回未修改的项目（不刷新修改时间）。

        Raises:
            NotFoundError: 项目或任务不存在
        """
        project = self._require(self._stores.projects, project_id)
        self._require(self._stores.tasks, task_id)

        if project.has_task(task_id):
            log.debug("task_already_in_project", project_id=project_id, task_id=task_id)
            return project

        updated = self._evolve(
            project,
            **self._touch_changes(project, task_ids=[*project.task_ids, task_id]),
        )
        self._stores.projects.save(updated)
        log.info("task_added_to_project", project_id=project_id, task_id=task_id)
        return updated

    def remove_task_from_project(self, project_id: str, task_id: str) -> Project:
        """从项目中移除任务

        不要求任务仍然存在（可移除悬空 ID），但 ID 必须在项目中。

        Raises:
            NotFoundError: 项目不存在
            AssociationError: 任务不在项目中，项目保持不变
        """
        require_id(task_id, "Task ID")
        project = self._require(self._stores.projects, project_id)
        if not project.has_task(task_id):
            raise AssociationError(f"Task {task_id} is not in project {project_id}")

        updated = self._evolve(
            project,
            **self._touch_changes(
                project, task_ids=[tid for tid in project.task_ids if tid != task_id]
            ),
        )
        self._stores.projects.save(updated)
        log.info("task_removed_from_project", project_id=project_id, task_id=task_id)
        return updated

    def get_tasks_in_project(self, project_id: str) -> list[Task]:
        """按项目 task_ids 顺序解析任务，已删除的任务静默跳过"""
        project = self._require(self._stores.projects, project_id)
        tasks: list[Task] = []
        for task_id in project.task_ids:
            task = self._stores.tasks.find_by_id(task_id)
            if task is None:
                log.debug("dangling_task_reference", project_id=project_id, task_id=task_id)
                continue
            tasks.append(task)
        return tasks

    # ------------------------------------------------------------------
    # Label
    # ------------------------------------------------------------------

    def create_label(self, name: str) -> Label:
        require_text(name, "label name")
        label = self._build(Label, id=self._ids.new_id(), name=name)
        self._stores.labels.save(label)
        log.info("label_created", label_id=label.id, name=name)
        return label

    def get_label(self, label_id: str) -> Label | None:
        require_id(label_id, "Label ID")
        return self._stores.labels.find_by_id(label_id)

    def get_label_by_name(self, name: str) -> Label | None:
        """按名称查找（不区分大小写），返回第一个匹配项"""
        require_text(name, "label name")
        wanted = name.casefold()
        for label in self._stores.labels.find_all():
            if label.name.casefold() == wanted:
                return label
        return None

    def list_labels(self) -> list[Label]:
        return self._stores.labels.find_all()

    def update_label_name(self, label_id: str, new_name: str) -> Label:
        require_text(new_name, "new label name")
        label = self._require(self._stores.labels, label_id)
        updated = self._evolve(label, name=new_name)
        self._stores.labels.save(updated)
        log.info("label_updated", label_id=label_id, field="name")
        return updated

    def attach_label(self, label_id: str, target_id: str, kind: EntityKind | str) -> bool:
        """为 Task 或 Note 绑定 Label

        Args:
            label_id: Label ID
            target_id: Task 或 Note 的 ID
            kind: 目标实体类型

        Returns:
            True 表示新绑定；False 表示已绑定（不视为错误，目标不变）

        Raises:
            ValidationError: kind 不是 Task / Note
            NotFoundError: Label 或目标实体不存在
        """
        store = self._labeled_store(kind)
        self._require(self._stores.labels, label_id)
        target: LabeledEntity = self._require(store, target_id)

        if target.has_label(label_id):
            log.debug("label_already_attached", label_id=label_id, target_id=target_id)
            return False

        updated = self._evolve(
            target,
            **self._touch_changes(target, label_ids=[*target.label_ids, label_id]),
        )
        store.save(updated)
        log.info("label_attached", label_id=label_id, target_id=target_id, kind=store.kind)
        return True

    def detach_label(self, label_id: str, target_id: str, kind: EntityKind | str) -> Task | Note:
        """解除 Task 或 Note 上的 Label 绑定

        严格模式：Label 未绑定时抛出 AssociationError，而不是静默成功。
        不要求 Label 本身仍存在。

        Raises:
            NotFoundError: 目标实体不存在
            AssociationError: Label 未绑定在目标上，目标保持不变
        """
        store = self._labeled_store(kind)
        require_id(label_id, "Label ID")
        target: LabeledEntity = self._require(store, target_id)

        if not target.has_label(label_id):
            raise AssociationError(
                f"Label {label_id} is not attached to {store.kind} {target_id}"
            )

        updated = self._evolve(
            target,
            **self._touch_changes(
                target, label_ids=[lid for lid in target.label_ids if lid != label_id]
            ),
        )
        store.save(updated)
        log.info("label_detached", label_id=label_id, target_id=target_id, kind=store.kind)
        return updated

    def delete_label(self, label_id: str) -> bool:
        """删除 Label，并从所有 Task / Note 中移除其 ID

        先在内存中完成全部 Task / Note 的更新计算，任何一步失败都不会
        写入 Store，也不会删除 Label；计算完成后依次写回，最后删除 Label。

        Returns:
            Label 记录是否确实被删除
        """
        require_id(label_id, "Label ID")
        now = self._now()

        updated_tasks = [
            self._evolve(task, label_ids=[lid for lid in task.label_ids if lid != label_id])
            for task in self._stores.tasks.find_all()
            if task.has_label(label_id)
        ]
        updated_notes = [
            self._evolve(
                note,
                label_ids=[lid for lid in note.label_ids if lid != label_id],
                last_modified_at=now,
            )
            for note in self._stores.notes.find_all()
            if note.has_label(label_id)
        ]

        for task in updated_tasks:
            self._stores.tasks.save(task)
        for note in updated_notes:
            self._stores.notes.save(note)

        deleted = self._stores.labels.delete_by_id(label_id)
        log.info(
            "label_deleted",
            label_id=label_id,
            deleted=deleted,
            tasks_updated=len(updated_tasks),
            notes_updated=len(updated_notes),
        )
        return deleted

    def get_tasks_by_label(self, label_id: str) -> list[Task]:
        """线性扫描所有 Task，返回绑定了该 Label 的任务"""
        self._require(self._stores.labels, label_id)
        return [task for task in self._stores.tasks.find_all() if task.has_label(label_id)]

    def get_notes_by_label(self, label_id: str) -> list[Note]:
        """线性扫描所有 Note，返回绑定了该 Label 的笔记"""
        self._require(self._stores.labels, label_id)
        return [note for note in self._stores.notes.find_all() if note.has_label(label_id)]

    # ------------------------------------------------------------------
    # Reminder
    # ------------------------------------------------------------------

    def create_reminder(
        self,
        message: str,
        reminder_time: datetime,
        target_id: str,
        target_kind: EntityKind | str,
    ) -> Reminder:
        """创建提醒

        仅在创建时校验目标存在；之后目标被删除不会影响提醒。

        Args:
            message: 提醒内容（非空）
            reminder_time: 提醒时间
            target_id: 关联的 Task 或 Note ID
            target_kind: "Task" / "Note" 或 EntityKind

        Raises:
            ValidationError: 参数为空或 target_kind 无法识别
            NotFoundError: 目标实体不存在，提醒不会写入
        """
        require_text(message, "reminder message")
        require_datetime(reminder_time, "reminder time")
        require_id(target_id, "associated entity ID")
        kind = require_enum(target_kind, EntityKind, "associated entity type")
        self._require(self._labeled_store(kind), target_id)

        reminder = self._build(
            Reminder,
            id=self._ids.new_id(),
            message=message,
            reminder_time=reminder_time,
            target=make_target(kind, target_id),
            dismissed=False,
        )
        self._stores.reminders.save(reminder)
        log.info(
            "reminder_created",
            reminder_id=reminder.id,
            target_kind=kind.value,
            target_id=target_id,
        )
        return reminder

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        require_id(reminder_id, "Reminder ID")
        return self._stores.reminders.find_by_id(reminder_id)

    def list_reminders(self) -> list[Reminder]:
        return self._stores.reminders.find_all()

    def get_reminders_for_entity(self, entity_id: str) -> list[Reminder]:
        """返回关联到指定 Task / Note 的全部提醒（目标是否仍存在不影响结果）"""
        require_id(entity_id, "entity ID")
        return [
            reminder
            for reminder in self._stores.reminders.find_all()
            if reminder.associated_entity_id == entity_id
        ]

    def get_due_reminders(self, as_of: datetime | None = None) -> list[Reminder]:
        """全表扫描，返回未忽略且 reminder_time <= as_of 的提醒

        Args:
            as_of: 截止时间，默认当前时间
        """
        cutoff = self._now() if as_of is None else as_aware(require_datetime(as_of, "as_of"))
        return [reminder for reminder in self._stores.reminders.find_all() if reminder.is_due(cutoff)]

    def update_reminder_message(self, reminder_id: str, new_message: str) -> Reminder:
        require_text(new_message, "new reminder message")
        reminder = self._require(self._stores.reminders, reminder_id)
        updated = self._evolve(reminder, message=new_message)
        self._stores.reminders.save(updated)
        log.info("reminder_updated", reminder_id=reminder_id, field="message")
        return updated

    def update_reminder_time(self, reminder_id: str, new_time: datetime) -> Reminder:
        require_datetime(new_time, "new reminder time")
        reminder = self._require(self._stores.reminders, reminder_id)
        updated = self._evolve(reminder, reminder_time=new_time)
        self._stores.reminders.save(updated)
        log.info("reminder_updated", reminder_id=reminder_id, field="reminder_time")
        return updated

    def dismiss_reminder(self, reminder_id: str) -> Reminder:
        reminder = self._require(self._stores.reminders, reminder_id)
        updated = self._evolve(reminder, dismissed=True)
        self._stores.reminders.save(updated)
        log.info("reminder_dismissed", reminder_id=reminder_id)
        return updated

    def delete_reminder(self, reminder_id: str) -> bool:
        deleted = self._stores.reminders.delete_by_id(reminder_id)
        log.info("reminder_deleted", reminder_id=reminder_id, deleted=deleted)
        return deleted
