"""输入模型共用的字段校验"""

from typing import Any

from pydantic_core import PydanticCustomError


def reject_blank(value: Any) -> Any:
    """None 或全空白字符串视为未填写"""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("blank", "can't be blank")
    return value
