"""User Domain Model"""

from pydantic import Field

from .base import Entity, NonEmptyStr


class User(Entity):
    """User 数据模型（username 的唯一性由 Coordinator 保证）"""

    username: NonEmptyStr = Field(description="用户名")
    email: NonEmptyStr = Field(description="邮箱")
