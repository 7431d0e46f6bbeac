"""Label Domain Model"""

from pydantic import Field

from .base import Entity, NonEmptyStr


class Label(Entity):
    """Label 数据模型

    Label 不保存反向引用，哪些 Task / Note 使用它需线性扫描得到。
    """

    name: NonEmptyStr = Field(description="标签名称")
