"""排序行为 OrderableMixin 测试

测试 OrderableMixin 的核心功能：
1. 排序字段配置与读写
2. 有序查询、下一个排序值分配
3. 唯一索引探测
"""

import pytest
from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, sessionmaker, scoped_session

from orderable.exceptions import OrderingConfigError, ErrorCode
from orderable.orm import (
    Base,
    CoreModel,
    OrderFieldMixin,
    OrderableMixin,
    configure_ordering,
)


# ==================== 测试模型定义 ====================

class OrderBanner(CoreModel, OrderFieldMixin, OrderableMixin):
    """轮播图 - 约定的 display_order 字段（普通索引）"""
    __tablename__ = "test_ordering_banner"
    __table_args__ = {'extend_existing': True}

    title: Mapped[str] = mapped_column(String(100))


class OrderSlide(CoreModel, OrderableMixin):
    """幻灯片 - display_order 唯一约束"""
    __tablename__ = "test_ordering_slide"
    __table_args__ = {'extend_existing': True}

    title: Mapped[str] = mapped_column(String(100))
    display_order: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)


class OrderTask(CoreModel, OrderableMixin):
    """任务 - 自定义排序字段 priority（唯一索引）"""
    __tablename__ = "test_ordering_task"
    __table_args__ = {'extend_existing': True}
    __ordering_field__ = "priority"

    title: Mapped[str] = mapped_column(String(100))
    priority: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)


class OrderStep(CoreModel, OrderFieldMixin, OrderableMixin):
    """步骤 - (flow_id, display_order) 联合唯一约束"""
    __tablename__ = "test_ordering_step"
    __table_args__ = (
        UniqueConstraint("flow_id", "display_order", name="uq_step_flow_order"),
        {'extend_existing': True},
    )

    flow_id: Mapped[int] = mapped_column(Integer)


class OrderBroken(CoreModel, OrderableMixin):
    """排序字段配置错误"""
    __tablename__ = "test_ordering_broken"
    __table_args__ = {'extend_existing': True}
    __ordering_field__ = "position"

    title: Mapped[str] = mapped_column(String(100))


# ==================== 测试类 ====================

class TestOrderingField:
    """排序字段配置与读写测试"""

    def test_default_ordering_attr(self):
        """测试默认排序字段名"""
        assert OrderBanner.ordering_attr() == "display_order"
        assert OrderSlide.ordering_attr() == "display_order"

    def test_custom_ordering_attr(self):
        """测试自定义排序字段名"""
        assert OrderTask.ordering_attr() == "priority"

    def test_ordering_attr_follows_configured_default(self):
        """测试未声明 __ordering_field__ 时使用全局配置"""
        class Plain(OrderableMixin):
            pass

        configure_ordering(default_field="position")
        assert Plain.ordering_attr() == "position"
        # 显式声明的字段不受影响
        assert OrderTask.ordering_attr() == "priority"

    def test_configure_rejects_empty_default_field(self):
        """测试 default_field 不能为空"""
        with pytest.raises(ValueError):
            configure_ordering(default_field="")

    def test_order_field_mixin_adds_column(self):
        """测试 OrderFieldMixin 添加 display_order 字段"""
        column = OrderBanner.__table__.c.display_order
        assert column.nullable is False
        assert column.index is True

    def test_get_and_set_ordering_value(self):
        """测试读写排序值"""
        task = OrderTask(title="t", priority=3)
        assert task.get_ordering_value() == 3

        result = task.set_ordering_value(8)
        assert result is task
        assert task.priority == 8
        assert task.get_ordering_value() == 8


class TestOrderedQuery:
    """有序查询与排序值分配测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """初始化数据库"""
        Base.metadata.create_all(bind=memory_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
        self.session_scope = scoped_session(SessionLocal)
        self.session = self.session_scope()
        CoreModel.query = self.session_scope.query_property()
        yield
        self.session_scope.remove()

    def _create_banners(self, orders):
        banners = [OrderBanner(title=f"Banner {o}", display_order=o) for o in orders]
        self.session.add_all(banners)
        self.session.commit()
        return banners

    def test_ordered_ascending(self):
        """测试升序查询"""
        self._create_banners([3, 1, 2])

        values = [b.display_order for b in OrderBanner.ordered().all()]
        assert values == [1, 2, 3]

    def test_ordered_desc_is_reverse(self):
        """测试降序查询是升序的逆序"""
        self._create_banners([5, 1, 4, 2])

        asc = [b.id for b in OrderBanner.ordered().all()]
        desc = [b.id for b in OrderBanner.ordered_desc().all()]
        assert desc == list(reversed(asc))

    def test_ordered_is_chainable(self):
        """测试有序查询可以继续追加条件"""
        self._create_banners([3, 1, 2])

        result = OrderBanner.ordered().filter(OrderBanner.display_order > 1).all()
        assert [b.display_order for b in result] == [2, 3]

    def test_ordered_with_explicit_session(self, db_session):
        """测试显式传入 session"""
        db_session.add_all([OrderBanner(title="a", display_order=2), OrderBanner(title="b", display_order=1)])
        db_session.flush()

        titles = [b.title for b in OrderBanner.ordered(session=db_session).all()]
        assert titles == ["b", "a"]

    def test_next_value_on_empty_table(self):
        """测试空表时下一个排序值为 1"""
        assert OrderBanner.get_next_ordering_value() == 1

    def test_next_value_is_max_plus_one(self):
        """测试下一个排序值为最大值 + 1（不要求连续）"""
        self._create_banners([3, 7, 2])
        assert OrderBanner.get_next_ordering_value() == 8

    def test_next_value_custom_field(self):
        """测试自定义排序字段的下一个排序值"""
        self.session.add_all([OrderTask(title="a", priority=4), OrderTask(title="b", priority=9)])
        self.session.commit()
        assert OrderTask.get_next_ordering_value() == 10

    def test_init_ordering_value(self):
        """测试新记录自动分配排序值"""
        self._create_banners([1, 2])

        banner = OrderBanner(title="new")
        assert banner.get_ordering_value() is None
        assert banner.init_ordering_value() is banner
        assert banner.display_order == 3

    def test_init_ordering_value_keeps_existing(self):
        """测试已有排序值时不覆盖"""
        self._create_banners([1, 2])

        banner = OrderBanner(title="new", display_order=10)
        banner.init_ordering_value()
        assert banner.display_order == 10

    def test_init_ordering_value_then_save(self):
        """测试分配排序值后保存"""
        banner = OrderBanner(title="first").init_ordering_value().save(commit=True)
        second = OrderBanner(title="second").init_ordering_value().save(commit=True)

        assert banner.display_order == 1
        assert second.display_order == 2

    def test_invalid_ordering_field_raises(self):
        """测试排序字段不是已映射列时报错"""
        with pytest.raises(OrderingConfigError) as exc_info:
            OrderBroken.ordered()

        assert exc_info.value.code == ErrorCode.INVALID_ORDERING_FIELD
        assert exc_info.value.extra["field"] == "position"


class TestUniqueOrdering:
    """唯一索引探测测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, memory_engine):
        """初始化数据库"""
        Base.metadata.create_all(bind=memory_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=memory_engine)
        self.session_scope = scoped_session(SessionLocal)
        CoreModel.query = self.session_scope.query_property()
        yield
        self.session_scope.remove()

    def test_plain_index_is_not_unique(self):
        """测试普通索引返回 False"""
        assert OrderBanner.has_unique_ordering() is False

    def test_unique_constraint_column(self):
        """测试列上的唯一约束返回 True"""
        assert OrderSlide.has_unique_ordering() is True

    def test_unique_index_on_custom_field(self):
        """测试自定义字段上的唯一索引返回 True"""
        assert OrderTask.has_unique_ordering() is True

    def test_composite_unique_constraint_counts(self):
        """测试包含排序字段的联合唯一约束也返回 True"""
        assert OrderStep.has_unique_ordering() is True

    def test_explicit_session(self, db_session):
        """测试显式传入 session"""
        assert OrderSlide.has_unique_ordering(session=db_session) is True
        assert OrderBanner.has_unique_ordering(session=db_session) is False
