"""Taskboard 异常体系

未找到 / 校验失败两类错误在最靠近写入的边界转换为类型化异常，
由路由层翻译为 404 / 422。流转到边界的空操作和空 changeset 不是错误。
"""

from pydantic import ValidationError

# pydantic 错误类型 -> 对外提示
_MESSAGES: dict[str, str] = {
    "missing": "can't be blank",
    "enum": "is not included in the list",
    "string_type": "must be a string",
    "datetime_parsing": "is not a valid timestamp",
    "datetime_type": "is not a valid timestamp",
    "datetime_from_date_parsing": "is not a valid timestamp",
}


class TaskboardError(Exception):
    """Taskboard 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方是否可以修正后重试
        """
        super().__init__(message)
        self.recoverable = recoverable


class TaskNotFoundError(TaskboardError):
    """任务不存在（或在仅查询活跃任务时已归档）"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class QuickNoteNotFoundError(TaskboardError):
    """随手记不存在"""

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Quick note with id {note_id} does not exist")
        self.note_id = note_id


class TaskValidationError(TaskboardError):
    """输入校验失败，携带 字段 -> 错误信息列表"""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__("; ".join(self.full_messages()))

    def full_messages(self) -> list[str]:
        """形如 "Title can't be blank" 的完整提示"""
        return [
            f"{field.replace('_', ' ').capitalize()} {message}"
            for field, messages in self.errors.items()
            for message in messages
        ]

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "TaskValidationError":
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("base",)
            field = str(loc[0])
            if error["type"] == "string_too_long":
                limit = error.get("ctx", {}).get("max_length")
                message = f"is too long (maximum is {limit} characters)"
            else:
                message = _MESSAGES.get(error["type"], error["msg"])
            errors.setdefault(field, []).append(message)
        return cls(errors)
