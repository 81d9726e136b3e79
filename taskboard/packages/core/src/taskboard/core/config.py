"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、休眠阈值、活动列表默认条数等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKBOARD_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKBOARD_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskboard.db"),
    )


# 超过多少天未推进视为休眠任务
DORMANT_DAYS: int = int(os.environ.get("TASKBOARD_DORMANT_DAYS", "7"))

# 活动列表默认返回条数
ACTIVITY_LIMIT: int = int(os.environ.get("TASKBOARD_ACTIVITY_LIMIT", "20"))

# 看板页展示的最近随手记条数
BOARD_NOTES_LIMIT: int = int(os.environ.get("TASKBOARD_BOARD_NOTES_LIMIT", "5"))
