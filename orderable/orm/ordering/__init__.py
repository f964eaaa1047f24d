"""排序行为模块

导出:
    - OrderFieldMixin: 排序字段 Mixin（提供 display_order 字段）
    - OrderableMixin: 排序行为 Mixin（有序查询、下一个排序值、重排序）
    - configure_ordering / get_ordering_settings: 全局排序配置

使用示例:
    from orderable.orm import CoreModel, OrderFieldMixin, OrderableMixin

    class Banner(CoreModel, OrderFieldMixin, OrderableMixin):
        title = mapped_column(String(100))

    Banner.ordered().all()
    Banner.get_next_ordering_value()
    Banner.reorder_batch([{"id": 2, "display_order": 1}, {"id": 1, "display_order": 2}])
    Banner.reorder_single(3, 1)
"""

from .ordering_fields import OrderFieldMixin
from .orderable_mixin import OrderableMixin
from .ordering_config import OrderingConfig, configure_ordering, get_ordering_settings
from .schema_inspector import column_has_unique_index, unique_column_sets

__all__ = [
    "OrderFieldMixin",
    "OrderableMixin",
    "OrderingConfig",
    "configure_ordering",
    "get_ordering_settings",
    "column_has_unique_index",
    "unique_column_sets",
]
