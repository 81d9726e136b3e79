"""时间戳工具 -- 统一 UTC + 定长 ISO-8601 存储格式

定长（固定微秒位）保证 SQLite 中按字符串比较与按时间比较一致。
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """naive 时间按 UTC 处理"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_ts(value: datetime) -> str:
    return ensure_utc(value).isoformat(timespec="microseconds")


def parse_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))
