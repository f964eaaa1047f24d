"""事务上下文

跟踪单个事务的状态、嵌套层级、保存点和钩子
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from orderable.log import get_logger

from .state import TransactionState
from .propagation import TransactionPropagation
from .hooks import TransactionHooks, TransactionHookType
from .exceptions import (
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
)

logger = get_logger("orderable.orm.transaction")


class TransactionContext:
    """事务上下文

    管理单个事务的完整生命周期，包括：
    - 事务状态跟踪
    - Savepoint 管理
    - 钩子执行
    - 提交抑制机制（事务内 model.save(commit=True) 改为 flush）

    使用示例:
        with TransactionContext(session) as tx:
            Banner.reorder_batch(items)

            with tx.savepoint():
                Banner.reorder_single(3, 1)

            @tx.after_commit
            def on_committed(ctx):
                cache.invalidate("banners")
    """

    def __init__(
        self,
        session: Session,
        auto_commit: bool = True,
        propagation: TransactionPropagation = None,
        suppress_commit: bool = True
    ):
        self._session = session
        self._auto_commit = auto_commit
        self._propagation = propagation or TransactionPropagation.REQUIRED
        self._suppress_commit = suppress_commit
        self._state = TransactionState.INACTIVE
        self._nesting_level = 0
        self._savepoint_counter = 0
        self._hooks = TransactionHooks()

        # 钩子之间传递数据
        self.data: Dict[str, Any] = {}

    # ==================== 属性 ====================

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == TransactionState.ACTIVE

    @property
    def nesting_level(self) -> int:
        return self._nesting_level

    @property
    def hooks(self) -> TransactionHooks:
        return self._hooks

    @property
    def propagation(self) -> TransactionPropagation:
        return self._propagation

    # ==================== 生命周期 ====================

    def begin(self) -> 'TransactionContext':
        """开始事务（SQLAlchemy 默认 autobegin，这里只切换状态）"""
        if self._state == TransactionState.ACTIVE:
            self._nesting_level += 1
            return self
        self._state = TransactionState.ACTIVE
        self._nesting_level = 1
        logger.debug("事务开始")
        return self

    def commit(self) -> None:
        """提交事务

        嵌套层级大于 1 时只减少层级，由最外层负责真正提交。
        """
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError()
        if self._state != TransactionState.ACTIVE:
            raise TransactionNotActiveError(f"无法提交：事务状态为 {self._state.value}")

        if self._nesting_level > 1:
            self._nesting_level -= 1
            return

        try:
            # before_commit 失败会阻止提交
            self._hooks.execute(TransactionHookType.BEFORE_COMMIT, self, raise_on_error=True)
            self._session.commit()
        except Exception as e:
            self._state = TransactionState.FAILED
            self._hooks.execute(TransactionHookType.ON_ERROR, self, error=e)
            raise

        self._state = TransactionState.COMMITTED
        self._nesting_level = 0
        errors = self._hooks.execute(TransactionHookType.AFTER_COMMIT, self)
        if errors:
            logger.warning(f"{len(errors)} 个 after_commit 钩子执行失败")
        logger.debug("事务提交成功")

    def rollback(self) -> None:
        """回滚事务（幂等）"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError("无法回滚：事务已提交")
        if self._state not in (TransactionState.ACTIVE, TransactionState.FAILED):
            return

        try:
            self._session.rollback()
        except Exception as e:
            self._state = TransactionState.FAILED
            logger.error(f"事务回滚失败: {e}")
            raise

        self._state = TransactionState.ROLLED_BACK
        self._nesting_level = 0
        self._hooks.execute(TransactionHookType.AFTER_ROLLBACK, self)
        logger.debug("事务已回滚")

    def flush(self) -> None:
        """将变更写入数据库但不提交"""
        if not self.is_active:
            raise TransactionNotActiveError("无法刷新：事务未激活")
        self._session.flush()

    @contextmanager
    def savepoint(self, name: str = None):
        """创建保存点

        块内抛出异常时只回滚到该保存点，异常继续向外抛出。

        使用示例:
            with tx.savepoint("before_move"):
                Banner.reorder_single(5, 1)
        """
        if not self.is_active:
            raise TransactionNotActiveError("无法创建保存点：事务未激活")

        if name is None:
            self._savepoint_counter += 1
            name = f"sp_{self._savepoint_counter}"

        nested = self._session.begin_nested()
        logger.debug(f"创建保存点: {name}")
        try:
            yield nested
        except Exception:
            if nested.is_active:
                nested.rollback()
            logger.debug(f"保存点 {name} 已回滚")
            raise
        else:
            if nested.is_active:
                nested.commit()

    # ==================== 提交抑制 ====================

    def should_suppress_commit(self) -> bool:
        """CoreModel 判断 commit=True 是否应该被忽略"""
        return self.is_active and self._suppress_commit

    # ==================== 钩子装饰器 ====================

    def before_commit(self, func: Callable) -> Callable:
        """注册 before_commit 钩子"""
        self._hooks.register(TransactionHookType.BEFORE_COMMIT, func)
        return func

    def after_commit(self, func: Callable) -> Callable:
        """注册 after_commit 钩子

        使用示例:
            @tx.after_commit
            def notify(ctx):
                publish("banners.reordered")
        """
        self._hooks.register(TransactionHookType.AFTER_COMMIT, func)
        return func

    def after_rollback(self, func: Callable) -> Callable:
        """注册 after_rollback 钩子"""
        self._hooks.register(TransactionHookType.AFTER_ROLLBACK, func)
        return func

    def on_error(self, func: Callable) -> Callable:
        """注册错误处理钩子"""
        self._hooks.register(TransactionHookType.ON_ERROR, func)
        return func

    # ==================== 上下文管理器 ====================

    def __enter__(self) -> 'TransactionContext':
        return self.begin()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self._hooks.execute(TransactionHookType.ON_ERROR, self, error=exc_val)
            self.rollback()
            return False

        if self._nesting_level > 1:
            self._nesting_level -= 1
        elif self._auto_commit and self.is_active:
            try:
                self.commit()
            except Exception:
                # commit 失败时回滚，清理 session 状态
                self.rollback()
                raise
        return False

    def __repr__(self) -> str:
        return (
            f"TransactionContext("
            f"state={self._state.value}, "
            f"nesting_level={self._nesting_level})"
        )
