"""祖先路径字段定义

提供默认列名（ancestry / ancestry_depth）的字段 Mixin。

使用示例:
    from ytree.orm import CoreModel
    from ytree.orm.tree import AncestryMixin, AncestryFieldsMixin

    class Category(AncestryMixin, AncestryFieldsMixin, CoreModel):
        __ancestry__ = {"cache_depth": True}

        name = mapped_column(String(100))
"""

from typing import Optional
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class AncestryFieldsMixin:
    """祖先路径字段 Mixin

    - ancestry: 祖先 ID 链（如 "1/4/9"），根节点为 NULL
    - ancestry_depth: 深度缓存（根节点为 0），仅在 cache_depth=True 时维护

    使用自定义列名时不要继承此 Mixin，直接在模型中定义列并在
    __ancestry__ 中指定 path_column / depth_cache_column。
    """

    ancestry: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        default=None,
        index=True,
        comment="祖先路径（如 1/4/9）"
    )

    ancestry_depth: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="深度缓存（根节点为0）"
    )


__all__ = ["AncestryFieldsMixin"]
