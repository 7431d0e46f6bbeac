"""输入校验工具 -- Coordinator 与 Store 共用

所有校验失败统一抛出 ValidationError。
"""

from datetime import datetime
from enum import StrEnum
from typing import TypeVar

from .exceptions import ValidationError

E = TypeVar("E", bound=StrEnum)


def require_id(value: str | None, what: str = "ID") -> str:
    """校验标识符非空

    Args:
        value: 待校验的标识符
        what: 错误信息中使用的字段名称

    Returns:
        原样返回的标识符

    Raises:
        ValidationError: 标识符为 None、非字符串或仅含空白
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} cannot be null or empty")
    return value


def require_text(value: str | None, what: str) -> str:
    """校验必填文本字段非空（不做 strip，保留原值）"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} cannot be null or empty")
    return value


def optional_text(value: str | None) -> str:
    """可选文本：None 归一化为空字符串"""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"expected text, got {type(value).__name__}")
    return value


def require_enum(value: E | str | None, enum_cls: type[E], what: str) -> E:
    """将枚举成员或其符号名解析为枚举成员

    Raises:
        ValidationError: 值为 None 或不是合法的符号名
    """
    if value is None:
        raise ValidationError(f"{what} cannot be null")
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"unsupported {what}: {value!r} (expected one of {allowed})") from None


def require_datetime(value: datetime | None, what: str) -> datetime:
    """校验时间参数非空且为 datetime"""
    if value is None:
        raise ValidationError(f"{what} cannot be null")
    if not isinstance(value, datetime):
        raise ValidationError(f"{what} must be a datetime, got {type(value).__name__}")
    return value
