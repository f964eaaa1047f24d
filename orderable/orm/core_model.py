"""
ORM基础模型

提供常用的CRUD操作与序列化方法
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, TYPE_CHECKING

from sqlalchemy import DateTime, func, inspect
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, Session, Query

if TYPE_CHECKING:
    from typing_extensions import Self

from orderable.log import get_logger

from .id_model import IdModel
from .utils import to_snake_case

logger = get_logger()


class CoreModel(IdModel):
    """ORM基础模型类

    继承自 IdModel，提供功能：
    - 自增主键（继承自 IdModel）
    - 自动表名生成（驼峰转下划线）
    - 创建/更新时间戳
    - 常用CRUD操作方法
    - 数据序列化方法

    使用示例:
        from orderable.orm import CoreModel, init_database

        init_database("sqlite:///./test.db")

        class JobLevel(CoreModel, OrderFieldMixin, OrderableMixin):
            title: Mapped[str] = mapped_column(String(50))

        level = JobLevel(title="Senior")
        level.init_ordering_value().save(commit=True)
    """
    __abstract__ = True

    # query 属性需要在 init_database 后通过 scoped_session.query_property() 设置
    # 测试环境中可以直接赋值：CoreModel.query = session_scope.query_property()
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]
    else:
        query = None

    _session: Session = None

    # 自动根据类名创建表名
    @declared_attr.directive
    def __tablename__(cls) -> str:
        """驼峰命名转下划线（支持 API 等缩写）"""
        name = cls.__name__
        if '_' in name:
            raise ValueError(f'{name}字符中包含下划线，无法转换')
        return to_snake_case(name)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        onupdate=func.now(),
        comment="更新时间"
    )

    # 系统字段列表（构造时自动忽略这些字段）
    _system_fields: ClassVar[set] = {'id', 'created_at', 'updated_at'}

    def __init__(self, **kwargs):
        """初始化模型实例

        自动忽略系统字段（id, created_at, updated_at），
        这些字段由系统自动管理，用户传入的值会被静默忽略。
        """
        for field in self._system_fields:
            kwargs.pop(field, None)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    @property
    def session(self) -> Session:
        """获取当前session

        优先从 query 属性获取 session，如果不可用则从全局 scoped_session 获取
        """
        if self._session is None:
            self._session = self.__class__._cls_session()
        return self._session

    @classmethod
    def _cls_session(cls) -> Session:
        """类级别的 session：query 已设置时用 query.session，否则用 db_manager"""
        if cls.query is not None:
            return cls.query.session
        from .db_session import db_manager
        return db_manager.get_session()

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（自动判断新增或更新）

        Args:
            commit: 是否立即提交，默认False
                   - 无事务时：执行 session.commit()
                   - 有事务时：commit 被抑制，改为 flush 以获取自动生成字段

        Returns:
            self: 返回自身，支持链式调用
        """
        # session.add() 是幂等的，对已在 session 中的对象调用是安全的
        self.session.add(self)
        self._commit_if(commit)
        return self

    @classmethod
    def save_all(cls, objects: list, commit: bool = False):
        """批量保存对象（新增或更新）

        Args:
            objects: 对象列表
            commit: 是否立即提交，默认False

        Returns:
            保存的对象列表
        """
        if not objects:
            return objects
        session = cls._cls_session()
        session.add_all(objects)
        if commit:
            if cls._should_suppress_commit(session):
                session.flush()
            else:
                session.commit()
        return objects

    def update(self, commit: bool = False, **kwargs) -> Self:
        """更新对象属性

        支持两种使用方式：
        1. 先修改属性，再调用 update()：
           level.title = "Lead"
           level.update(commit=True)

        2. 通过 kwargs 直接更新属性：
           level.update(title="Lead", commit=True)

        Returns:
            self: 返回自身，支持链式调用
        """
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        self._commit_if(commit)
        return self

    def delete(self, commit: bool = False):
        """删除对象"""
        self.session.delete(self)
        self._commit_if(commit)

    def refresh(self, attribute_names: list = None) -> Self:
        """从数据库重新加载对象状态

        Args:
            attribute_names: 可选，指定要刷新的属性列表

        Returns:
            self: 返回自身，支持链式调用
        """
        if attribute_names:
            self.session.refresh(self, attribute_names)
        else:
            self.session.refresh(self)
        return self

    @classmethod
    def get(cls, id: int):
        """根据ID获取对象，不存在返回None"""
        return cls.query.filter_by(id=id).first()

    @classmethod
    def get_all(cls):
        """获取所有记录"""
        return cls.query.all()

    # ==================== 序列化方法 ====================

    def to_dict(self, exclude: set = None) -> dict:
        """转换为字典

        Args:
            exclude: 需要排除的字段集合

        Returns:
            字典格式的对象数据
        """
        exclude = exclude or set()
        return {
            c.key: getattr(self, c.key)
            for c in inspect(self).mapper.column_attrs
            if c.key not in exclude
        }

    # ==================== 提交控制 ====================

    def _commit_if(self, commit: bool = False):
        """根据参数决定是否提交

        当在事务上下文中且启用了提交抑制时，commit=True 会被忽略，
        但会自动执行 flush 以获取自动生成的字段（id, created_at 等）。
        """
        if not commit:
            return
        if self._should_suppress_commit(self.session):
            self.session.flush()
            self.session.refresh(self)
            return
        self.session.commit()

    @staticmethod
    def _should_suppress_commit(session: Session) -> bool:
        """检查是否应该抑制提交

        只有当前事务和 session 是同一个时才抑制，其他 session 的事务不影响。
        """
        from .transaction import get_current_transaction
        tx = get_current_transaction()
        if tx is not None and tx.session is session and tx.should_suppress_commit():
            logger.debug("commit=True 被事务上下文抑制")
            return True
        return False
