"""排序字段定义

提供约定的 display_order 字段，简化模型定义。

使用示例:
    from orderable.orm import CoreModel
    from orderable.orm.ordering import OrderFieldMixin, OrderableMixin

    class Banner(CoreModel, OrderFieldMixin, OrderableMixin):
        title = mapped_column(String(100))
        # display_order 字段由 OrderFieldMixin 自动提供
"""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column


class OrderFieldMixin:
    """排序字段 Mixin

    字段说明:
        - display_order: 排序位置，默认为0，值越小越靠前

    需要唯一约束时自行声明字段：

        class Slide(CoreModel, OrderableMixin):
            display_order: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    """

    display_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        index=True,
        comment="排序位置"
    )


__all__ = [
    "OrderFieldMixin",
]
