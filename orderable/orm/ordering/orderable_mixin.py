"""排序行为 Mixin

为模型提供排序位置的读写、有序查询、下一个排序值分配，
以及在唯一索引下也不会产生中间冲突的重排序操作。

使用示例:
    from orderable.orm import CoreModel
    from orderable.orm.ordering import OrderFieldMixin, OrderableMixin

    class Banner(CoreModel, OrderFieldMixin, OrderableMixin):
        title = mapped_column(String(100))

    # 自定义排序字段
    class Task(CoreModel, OrderableMixin):
        __ordering_field__ = "priority"
        priority: Mapped[int] = mapped_column(Integer, unique=True)

    Banner.ordered().all()
    Banner.reorder_batch([{"id": 3, "display_order": 1}, {"id": 1, "display_order": 2}])
    Banner.reorder_single(3, 1)
"""

from collections.abc import Mapping
from typing import Any, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import ColumnProperty, Query, Session

from orderable.exceptions import Err, ErrorCode
from orderable.log import get_logger

from ..transaction import transaction_manager
from .ordering_config import get_ordering_settings
from .schema_inspector import column_has_unique_index

logger = get_logger("orderable.orm.ordering")


def _item_value(item: Any, key: str) -> Any:
    """从批量条目中取值，支持字典和带属性的对象"""
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


class OrderableMixin:
    """排序行为 Mixin

    可配置属性（子类可覆盖）:
        - __ordering_field__: 排序字段名，None 时使用全局配置
          OrderingSettings.default_field（默认 "display_order"）

    所有类方法都接受可选的 session 参数；不传时依次尝试
    cls.query.session 和 db_manager 的 scoped session。

    约定排序值为非负整数。重排序过程使用负数作为临时占位，
    表中预先存在的负数会干扰 reorder_single 的区间回写。
    """

    # ==================== 配置 ====================

    __ordering_field__: Optional[str] = None

    # ==================== 内部方法 ====================

    @classmethod
    def _resolve_session(cls, session: Session = None) -> Session:
        if session is not None:
            return session
        query = getattr(cls, "query", None)
        if query is not None:
            return query.session
        from ..db_session import db_manager
        return db_manager.get_session()

    @classmethod
    def _ordering_property(cls) -> ColumnProperty:
        field = cls.ordering_attr()
        attr = getattr(cls, field, None)
        prop = getattr(attr, "property", None)
        if not isinstance(prop, ColumnProperty):
            raise Err.config(
                f"{cls.__name__} 的排序字段 '{field}' 不是已映射的列",
                model=cls.__name__,
                field=field,
            )
        return prop

    @classmethod
    def _ordering_column(cls):
        """排序字段的 InstrumentedAttribute"""
        cls._ordering_property()
        return getattr(cls, cls.ordering_attr())

    # ==================== 字段 ====================

    @classmethod
    def ordering_attr(cls) -> str:
        """返回排序字段名"""
        return cls.__ordering_field__ or get_ordering_settings().default_field

    def get_ordering_value(self):
        """获取当前排序值"""
        return getattr(self, self.ordering_attr())

    def set_ordering_value(self, value):
        """设置排序值（不校验，不写库）

        Returns:
            self: 支持链式调用
        """
        setattr(self, self.ordering_attr(), value)
        return self

    # ==================== 查询 ====================

    @classmethod
    def ordered(cls, session: Session = None) -> Query:
        """按排序字段升序的查询，可继续追加过滤条件

        Example:
            Banner.ordered().filter(Banner.title.like("首页%")).all()
        """
        session = cls._resolve_session(session)
        return session.query(cls).order_by(cls._ordering_column().asc())

    @classmethod
    def ordered_desc(cls, session: Session = None) -> Query:
        """按排序字段降序的查询"""
        session = cls._resolve_session(session)
        return session.query(cls).order_by(cls._ordering_column().desc())

    @classmethod
    def get_next_ordering_value(cls, session: Session = None) -> int:
        """全表最大排序值 + 1，空表返回 1

        注意：并发插入时可能分配到相同的值，需要调用方自行串行化。
        """
        session = cls._resolve_session(session)
        current_max = session.query(func.max(cls._ordering_column())).scalar()
        return (current_max if current_max is not None else 0) + 1

    def init_ordering_value(self, session: Session = None):
        """排序值为空时分配下一个排序值

        Returns:
            self: 支持链式调用

        Example:
            banner = Banner(title="新品").init_ordering_value()
            banner.save(commit=True)
        """
        if self.get_ordering_value() is None:
            self.set_ordering_value(self.__class__.get_next_ordering_value(session))
        return self

    @classmethod
    def has_unique_ordering(cls, session: Session = None) -> bool:
        """数据库中是否有唯一索引或唯一约束覆盖排序字段

        读取的是数据库实际结构。结果仅供参考，重排序操作不依赖它。
        """
        session = cls._resolve_session(session)
        column_name = cls._ordering_property().columns[0].name
        table = cls.__table__
        return column_has_unique_index(session.get_bind(), table.name, column_name, schema=table.schema)

    # ==================== 重排序 ====================

    @classmethod
    def _validate_batch(cls, items: list, field: str) -> None:
        details = []
        for index, item in enumerate(items):
            if not _item_value(item, "id"):
                details.append(f"第 {index} 项缺少 id")
            if _item_value(item, field) is None:
                details.append(f"第 {index} 项缺少 {field}")
        if details:
            raise Err.invalid(
                "批量排序数据不完整",
                code=ErrorCode.MISSING_ORDERING_VALUE,
                details=details,
            )

    @classmethod
    def reorder_batch(cls, items: Iterable, session: Session = None, strict: bool = None) -> None:
        """批量设置排序值（前端拖拽后整体提交）

        分两轮写入：先把每条记录移到负数占位值 -(下标+1)，
        再写入目标值，这样目标值之间互换也不会触发唯一约束。
        整个过程在一个事务中完成，出错时全部回滚并原样抛出异常。

        Args:
            items: 条目序列，每项包含 id 和排序字段，如
                   [{"id": 3, "display_order": 1}, {"id": 1, "display_order": 2}]
            session: 数据库会话
            strict: 是否严格校验，None 时使用 OrderingSettings.strict_batch

        宽松模式下：
            - 缺少 id 或 id 不存在的条目被跳过
            - 缺少目标值的条目保留负数占位值（记录警告日志）

        Raises:
            ValidationException: 严格模式下有条目缺少 id 或目标值（写库前抛出）
        """
        field = cls.ordering_attr()
        cls._ordering_property()
        items = list(items)
        if strict is None:
            strict = get_ordering_settings().strict_batch
        if strict:
            cls._validate_batch(items, field)

        session = cls._resolve_session(session)
        displaced = {}
        with transaction_manager.transaction(session=session):
            for index, item in enumerate(items):
                item_id = _item_value(item, "id")
                if not item_id:
                    continue
                obj = session.get(cls, item_id)
                if obj is None:
                    continue
                setattr(obj, field, -(index + 1))
                displaced[index] = obj
            session.flush()

            placeholders = []
            for index, obj in displaced.items():
                value = _item_value(items[index], field)
                if value is None:
                    placeholders.append(index)
                    continue
                setattr(obj, field, value)
            session.flush()

        logger.debug(f"{cls.__name__}.reorder_batch: {len(items)} 项，实际更新 {len(displaced)} 项")
        if placeholders:
            logger.warning(
                f"{cls.__name__}.reorder_batch: 第 {placeholders} 项缺少 {field}，保留负数占位值"
            )

    @classmethod
    def reorder_single(cls, item_id, new_position: int, session: Session = None) -> None:
        """把一条记录移动到指定位置，区间内其他记录顺移一位

        - 下移（new_position > 当前值）：[当前值+1, new_position] 内的记录减 1
        - 上移或不动：[new_position, 当前值-1] 内的记录加 1
        - 记录不存在时直接返回，不写库

        区间平移先写成取反后的新值，移动目标记录后再取反回正，
        唯一索引下每一步都不会出现重复值。

        Example:
            # 位置 1,2,3,4 -> 把 id=3 移到第 1 位 -> id 3,1,2,4
            Banner.reorder_single(3, 1)

        Raises:
            ValidationException: 记录当前排序值或 new_position 为空
        """
        field = cls.ordering_attr()
        column = cls._ordering_column()
        session = cls._resolve_session(session)

        with transaction_manager.transaction(session=session):
            item = session.get(cls, item_id)
            if item is None:
                logger.debug(f"{cls.__name__}.reorder_single: id={item_id} 不存在，跳过")
                return

            current = getattr(item, field)
            if current is None or new_position is None:
                raise Err.invalid(
                    f"{cls.__name__} id={item_id} 排序值为空，无法移动",
                    code=ErrorCode.MISSING_ORDERING_VALUE,
                )

            if new_position > current:
                low, high, delta = current + 1, new_position, -1
            else:
                low, high, delta = new_position, current - 1, 1

            shifted = session.query(cls).filter(column.between(low, high)).update(
                {column: -(column + delta)}, synchronize_session="fetch"
            )

            setattr(item, field, new_position)
            session.flush()

            if shifted:
                session.query(cls).filter(
                    column.between(-(high + delta), -(low + delta))
                ).update({column: -column}, synchronize_session="fetch")

            logger.debug(
                f"{cls.__name__}.reorder_single: id={item_id} {current} -> {new_position}，"
                f"{'下移' if delta < 0 else '上移'}，平移 {shifted} 条"
            )


__all__ = [
    "OrderableMixin",
]
