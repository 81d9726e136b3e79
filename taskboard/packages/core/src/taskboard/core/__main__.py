"""CLI 入口模块 -- python -m taskboard.core <command>

支持的命令：
  init-db  创建 / 升级数据库表结构
  dormant  列出休眠的活跃任务（最近推进时间倒序，从未推进的排最后）
  stats    按状态和负责方统计活跃任务
"""

import asyncio
import sys

from .config import DORMANT_DAYS, get_db_path

_USAGE = """用法: python -m taskboard.core <command>
命令:
  init-db  创建 / 升级数据库表结构
  dormant  列出休眠的活跃任务
  stats    按状态和负责方统计活跃任务"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]
    commands = {
        "init-db": init_database,
        "dormant": list_dormant,
        "stats": print_stats,
    }
    if command not in commands:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(commands)}")
        sys.exit(1)

    asyncio.run(commands[command]())


async def init_database() -> None:
    from .store import create_store_group

    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print(f"数据库已初始化: {db_path}")


async def list_dormant() -> None:
    from .query import TaskQuery
    from .store import create_store_group
    from .timestamps import utc_now

    store_group = await create_store_group(get_db_path())
    try:
        query = TaskQuery().dormant(utc_now(), DORMANT_DAYS).by_last_worked()
        tasks = await store_group.task_store.list_tasks(query)
    finally:
        await store_group.conn.close()

    if not tasks:
        print(f"没有超过 {DORMANT_DAYS} 天未推进的任务")
        return
    for task in tasks:
        worked = task.last_worked_on.isoformat() if task.last_worked_on else "Never"
        print(f"{task.task_id}  [{task.status.value}] {task.assignee.value}  {worked}  {task.title}")


async def print_stats() -> None:
    from .models.enums import STATUS_SEQUENCE, Assignee
    from .query import TaskQuery
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        active = TaskQuery()
        total = await store_group.task_store.count_tasks(active)
        by_status = await store_group.task_store.count_by("status", active)
        by_assignee = await store_group.task_store.count_by("assignee", active)
    finally:
        await store_group.conn.close()

    print(f"活跃任务: {total}")
    for status in STATUS_SEQUENCE:
        print(f"  {status.value:<12}{by_status.get(status.value, 0)}")
    for assignee in Assignee:
        print(f"  {assignee.value:<12}{by_assignee.get(assignee.value, 0)}")


if __name__ == "__main__":
    main()
