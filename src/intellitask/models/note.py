"""Note Domain Model"""

from pydantic import Field

from .base import LabeledEntity, NonEmptyStr, OptionalText, Timestamp


class Note(LabeledEntity):
    """Note 数据模型

    content 允许为空，None 归一化为空字符串。
    title / content / label_ids 的每次修改都会刷新 last_modified_at。
    """

    title: NonEmptyStr = Field(description="标题")
    content: OptionalText = Field(default="", description="正文")
    created_at: Timestamp = Field(description="创建时间")
    last_modified_at: Timestamp = Field(description="最后修改时间")
