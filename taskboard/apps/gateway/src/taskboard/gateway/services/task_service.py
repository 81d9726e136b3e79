"""TaskService -- 看板任务业务逻辑

写入分两类：
- 受追踪的写入（create / update / advance / regress / backdate）：
  字段写入与活动记录在同一事务内提交；status / assignee 变化时顺带刷新 last_worked_on。
- 原始写入（archive / restore / touch / raw_update）：绕过校验，
  不经过 diff 流程；archive / restore 之后再单独写一条专门的活动记录。
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError
from taskboard.core.activity import (
    archive_activity,
    creation_activity,
    deletion_activity,
    derive_update_activity,
    diff_fields,
    restore_activity,
)
from taskboard.core.config import ACTIVITY_LIMIT, BOARD_NOTES_LIMIT
from taskboard.core.exceptions import TaskNotFoundError, TaskValidationError
from taskboard.core.models import (
    STATUS_SEQUENCE,
    WORK_TRACKING_FIELDS,
    ArchiveMode,
    Assignee,
    Priority,
    QuickNote,
    Task,
    TaskActivity,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    next_status,
    previous_status,
)
from taskboard.core.query import TaskQuery
from taskboard.core.store import StoreGroup
from taskboard.core.store.protocols import ActivityStore, TaskStore
from taskboard.core.store.transaction import (
    append_activity_only,
    create_task_with_activity,
    update_task_with_activity,
)
from taskboard.core.timestamps import ensure_utc, utc_now
from ulid import ULID

log = structlog.get_logger()

Clock = Callable[[], datetime]


class TransitionResult(BaseModel):
    """advance / regress 的结果，moved=False 表示已在链的端点"""

    task: Task
    moved: bool


class TaskStats(BaseModel):
    """活跃任务计数，所有枚举值都有条目（缺失补 0）"""

    total: int
    by_assignee: dict[str, int]
    by_status: dict[str, int]


class BoardColumn(BaseModel):
    status: TaskStatus
    tasks: list[Task]


class Board(BaseModel):
    """看板：按状态链顺序分列的活跃任务 + 最近随手记"""

    columns: list[BoardColumn]
    quick_notes: list[QuickNote]


class _BackdateInput(BaseModel):
    last_worked_on: datetime


class _RawEnumColumns(BaseModel):
    """raw_update 中枚举列的取值检查，其余列不校验"""

    assignee: Assignee | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None


_RAW_ENUM_COLUMNS: frozenset[str] = frozenset(_RawEnumColumns.model_fields)


def _check_raw_columns(columns: Mapping[str, Any]) -> dict[str, Any]:
    """枚举列只接受枚举值（表上有 CHECK 约束），非法值转为 TaskValidationError"""
    provided = {k: v for k, v in columns.items() if k in _RAW_ENUM_COLUMNS}
    try:
        checked = _RawEnumColumns.model_validate(provided)
    except ValidationError as e:
        raise TaskValidationError.from_pydantic(e) from e
    blank = [k for k in provided if getattr(checked, k) is None]
    if blank:
        raise TaskValidationError({k: ["can't be blank"] for k in blank})
    return {**columns, **{k: getattr(checked, k) for k in provided}}


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, clock: Clock = utc_now) -> None:
        self._stores = store_group
        self._tasks: TaskStore = store_group.task_store
        self._activities: ActivityStore = store_group.activity_store
        self._clock = clock

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    async def _require(
        self,
        task_id: str,
        archive_mode: ArchiveMode = ArchiveMode.ACTIVE,
    ) -> Task:
        task = await self._tasks.get_task(task_id, archive_mode)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # ---- 查询 ----

    async def get_task(
        self,
        task_id: str,
        archive_mode: ArchiveMode = ArchiveMode.ACTIVE,
    ) -> Task:
        """查询单个任务

        Raises:
            TaskNotFoundError: 不存在，或在当前归档模式下不可见
        """
        return await self._require(task_id, archive_mode)

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        return await self._tasks.list_tasks(query)

    async def recent_activities(
        self,
        task_id: str,
        limit: int = ACTIVITY_LIMIT,
    ) -> list[TaskActivity]:
        """任务的最近活动，最新的在前（归档任务同样可查）"""
        await self._require(task_id, ArchiveMode.ALL)
        return await self._activities.recent_activities(task_id, limit)

    async def stats(self) -> TaskStats:
        active = TaskQuery()
        by_assignee = await self._tasks.count_by("assignee", active)
        by_status = await self._tasks.count_by("status", active)
        return TaskStats(
            total=await self._tasks.count_tasks(active),
            by_assignee={a.value: by_assignee.get(a.value, 0) for a in Assignee},
            by_status={s.value: by_status.get(s.value, 0) for s in STATUS_SEQUENCE},
        )

    async def board(self, notes_limit: int = BOARD_NOTES_LIMIT) -> Board:
        tasks = await self._tasks.list_tasks(TaskQuery().by_priority())
        columns = [
            BoardColumn(status=status, tasks=[t for t in tasks if t.status == status])
            for status in STATUS_SEQUENCE
        ]
        notes = await self._stores.quick_note_store.list_notes(limit=notes_limit)
        return Board(columns=columns, quick_notes=notes)

    # ---- 受追踪的写入 ----

    async def create_task(
        self,
        fields: Mapping[str, Any] | TaskCreate,
        actor: str | None = None,
    ) -> Task:
        """创建任务并记录 created 活动

        Raises:
            TaskValidationError: 标题为空、枚举值非法等
        """
        try:
            data = (
                fields
                if isinstance(fields, TaskCreate)
                else TaskCreate.model_validate(dict(fields))
            )
        except ValidationError as e:
            raise TaskValidationError.from_pydantic(e) from e

        now = self._now()
        task = Task(
            task_id=str(ULID()),
            created_at=now,
            updated_at=now,
            title=data.title,
            description=data.description,
            assignee=data.assignee,
            status=data.status,
            priority=data.priority,
            owner=actor,
        )
        await create_task_with_activity(
            self._stores.conn,
            self._stores.task_store,
            self._stores.activity_store,
            task,
            creation_activity(task, actor, now),
        )
        log.info(
            "task_created",
            task_id=task.task_id,
            status=task.status.value,
            assignee=task.assignee.value,
            actor=actor,
        )
        return task

    async def update_task(
        self,
        task_id: str,
        fields: Mapping[str, Any] | TaskUpdate,
        actor: str | None = None,
    ) -> Task:
        """部分更新，按实际变化的字段记录一条活动

        没有字段真正变化时不写入、不记录（不是错误）。

        Raises:
            TaskNotFoundError: 任务不存在或已归档
            TaskValidationError: 输入非法
        """
        try:
            data = (
                fields
                if isinstance(fields, TaskUpdate)
                else TaskUpdate.model_validate(dict(fields))
            )
        except ValidationError as e:
            raise TaskValidationError.from_pydantic(e) from e

        task = await self._require(task_id)
        changes = diff_fields(task, data.provided())
        if not changes:
            log.debug("task_update_noop", task_id=task_id)
            return task

        now = self._now()
        await self._write_tracked(task, changes, actor, now)
        log.info(
            "task_updated",
            task_id=task_id,
            fields=sorted(changes),
            actor=actor,
        )
        return await self._require(task_id)

    async def advance(
        self,
        task_id: str,
        actor: str | None = None,
        track: bool = True,
    ) -> TransitionResult:
        """向右移动一格；已在 done 时为空操作"""
        return await self._transition(task_id, actor, track, next_status, "advance")

    async def regress(
        self,
        task_id: str,
        actor: str | None = None,
        track: bool = True,
    ) -> TransitionResult:
        """向左移动一格；已在 hold 时为空操作"""
        return await self._transition(task_id, actor, track, previous_status, "regress")

    async def _transition(
        self,
        task_id: str,
        actor: str | None,
        track: bool,
        step: Callable[[TaskStatus], TaskStatus | None],
        direction: str,
    ) -> TransitionResult:
        task = await self._require(task_id)
        target = step(task.status)
        if target is None:
            log.info(
                "task_transition_noop",
                task_id=task_id,
                status=task.status.value,
                direction=direction,
            )
            return TransitionResult(task=task, moved=False)

        now = self._now()
        changes = {"status": (task.status, target)}
        if track:
            await self._write_tracked(task, changes, actor, now)
        else:
            await update_task_with_activity(
                self._stores.conn,
                self._stores.task_store,
                self._stores.activity_store,
                task_id,
                {"status": target, "last_worked_on": now, "updated_at": now},
            )
        log.info(
            "task_moved",
            task_id=task_id,
            from_status=task.status.value,
            to_status=target.value,
            direction=direction,
            tracked=track,
        )
        return TransitionResult(task=await self._require(task_id), moved=True)

    def check_backdate(self, when: datetime | str | None) -> datetime:
        """解析并校验 backdate 的目标时间，不写库"""
        if when is None:
            raise TaskValidationError({"last_worked_on": ["can't be blank"]})
        try:
            value = ensure_utc(_BackdateInput(last_worked_on=when).last_worked_on)
        except ValidationError as e:
            raise TaskValidationError.from_pydantic(e) from e
        if value > self._now():
            raise TaskValidationError({"last_worked_on": ["can't be in the future"]})
        return value

    async def backdate(
        self,
        task_id: str,
        when: datetime | str,
        actor: str | None = None,
    ) -> Task:
        """管理用：把 last_worked_on 设为给定的过去时间，记录一条 updated 活动

        Raises:
            TaskValidationError: 时间为空、无法解析或晚于当前时间
        """
        value = self.check_backdate(when)
        now = self._now()
        task = await self._require(task_id)
        changes = {"last_worked_on": (task.last_worked_on, value)}
        await update_task_with_activity(
            self._stores.conn,
            self._stores.task_store,
            self._stores.activity_store,
            task_id,
            {"last_worked_on": value, "updated_at": now},
            derive_update_activity(task_id, changes, actor, now),
        )
        log.info("task_backdated", task_id=task_id, last_worked_on=value.isoformat())
        return await self._require(task_id)

    async def _write_tracked(
        self,
        task: Task,
        changes: dict[str, tuple[Any, Any]],
        actor: str | None,
        now: datetime,
    ) -> None:
        columns: dict[str, Any] = {field: new for field, (_, new) in changes.items()}
        if WORK_TRACKING_FIELDS & changes.keys():
            columns["last_worked_on"] = now
        columns["updated_at"] = now
        await update_task_with_activity(
            self._stores.conn,
            self._stores.task_store,
            self._stores.activity_store,
            task.task_id,
            columns,
            derive_update_activity(task.task_id, changes, actor, now),
        )

    # ---- 原始写入 ----

    async def archive_task(self, task_id: str, actor: str | None = None) -> Task:
        """归档（软删除）：只翻转标记，不校验、不刷新时间戳

        Raises:
            TaskNotFoundError: 任务不存在或已归档
        """
        task = await self._require(task_id, ArchiveMode.ACTIVE)
        await self._tasks.set_archived(task_id, True)
        await self._stores.conn.commit()
        await append_activity_only(
            self._stores.conn,
            self._stores.activity_store,
            archive_activity(task, actor, self._now()),
        )
        log.info("task_archived", task_id=task_id, actor=actor)
        return task.model_copy(update={"archived": True})

    async def restore_task(self, task_id: str, actor: str | None = None) -> Task:
        """从归档中恢复

        Raises:
            TaskNotFoundError: 任务不存在或未归档
        """
        task = await self._require(task_id, ArchiveMode.ARCHIVED)
        await self._tasks.set_archived(task_id, False)
        await self._stores.conn.commit()
        await append_activity_only(
            self._stores.conn,
            self._stores.activity_store,
            restore_activity(task, actor, self._now()),
        )
        log.info("task_restored", task_id=task_id, actor=actor)
        return task.model_copy(update={"archived": False})

    async def touch_last_worked(self, task_id: str) -> Task:
        """把 last_worked_on 设为当前时间，不记录活动"""
        task = await self._require(task_id)
        now = self._now()
        await self._tasks.update_columns(task_id, {"last_worked_on": now})
        await self._stores.conn.commit()
        log.info("task_touched", task_id=task_id)
        return task.model_copy(update={"last_worked_on": now})

    async def raw_update(self, task_id: str, columns: Mapping[str, Any]) -> Task:
        """直接写列：不走字段校验、不记录活动、不刷新时间戳（任何归档状态均可）

        枚举列（assignee / status / priority）仍只接受枚举值。

        Raises:
            TaskValidationError: 枚举列取值非法
        """
        columns = _check_raw_columns(columns)
        await self._require(task_id, ArchiveMode.ALL)
        await self._tasks.update_columns(task_id, columns)
        await self._stores.conn.commit()
        return await self._require(task_id, ArchiveMode.ALL)

    async def purge_task(self, task_id: str, actor: str | None = None) -> None:
        """物理删除任务及其活动记录（归档任务同样可删）

        删除记录无法留在活动表中，只输出到结构化日志。
        """
        task = await self._require(task_id, ArchiveMode.ALL)
        record = deletion_activity(task, actor, self._now())
        await self._tasks.delete_task(task_id)
        await self._stores.conn.commit()
        log.info(
            "task_purged",
            task_id=task_id,
            description=record.description,
            actor=actor,
        )
