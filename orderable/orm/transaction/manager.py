"""事务管理器

提供事务管理的统一入口
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Callable, Dict, Generator, List, Optional, TypeVar

from sqlalchemy.orm import Session

from orderable.log import get_logger

from .propagation import TransactionPropagation
from .hooks import TransactionHookType
from .context import TransactionContext
from .exceptions import PropagationError

logger = get_logger("orderable.orm.transaction")

T = TypeVar('T')

# 当前事务上下文（线程/协程安全）
_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    '_current_transaction', default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """获取当前事务上下文，不在事务中返回 None"""
    return _current_transaction.get()


class TransactionManager:
    """事务管理器

    使用示例:
        from orderable.orm import transaction_manager as tm

        with tm.transaction() as tx:
            Banner.reorder_batch(items)
            tx.after_commit(lambda ctx: print("已提交"))

        @tm.transactional()
        def move_to_top(banner_id):
            Banner.reorder_single(banner_id, 1)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._global_hooks: Dict[TransactionHookType, List[Callable]] = {
            hook_type: [] for hook_type in TransactionHookType
        }
        self._default_suppress_commit = True
        self._initialized = True

    def get_session(self) -> Session:
        """获取数据库 session"""
        from ..db_session import db_manager
        return db_manager.get_session()

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        return _current_transaction.get()

    def configure(self, suppress_commit_in_transaction: bool = None) -> None:
        """配置事务管理器

        Args:
            suppress_commit_in_transaction: 是否在事务中抑制 commit=True
        """
        if suppress_commit_in_transaction is not None:
            self._default_suppress_commit = suppress_commit_in_transaction

    def add_global_hook(self, hook_type: TransactionHookType, func: Callable) -> Callable:
        """注册对之后所有新事务生效的钩子"""
        self._global_hooks[hook_type].append(func)
        return func

    def clear_global_hooks(self) -> None:
        for funcs in self._global_hooks.values():
            funcs.clear()

    def is_in_transaction(self) -> bool:
        tx = self.current_transaction
        return tx is not None and tx.is_active

    @contextmanager
    def _join(self, current: TransactionContext, label: str):
        current._nesting_level += 1
        logger.debug(f"{label}: 加入现有事务 (level={current._nesting_level})")
        try:
            yield current
        finally:
            if current._nesting_level > 0:
                current._nesting_level -= 1

    @contextmanager
    def transaction(
        self,
        session: Session = None,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        auto_commit: bool = True,
        suppress_commit: bool = None
    ) -> Generator[TransactionContext, None, None]:
        """创建事务上下文

        Args:
            session: 数据库会话，不传则从 db_manager 获取
            propagation: 事务传播行为
            auto_commit: 正常退出时是否自动提交
            suppress_commit: 是否抑制内部 commit=True，None 使用默认配置

        Yields:
            TransactionContext 对象

        加入外层事务（REQUIRED/MANDATORY）时异常会原样抛出，
        由最外层上下文负责回滚。外层事务属于其他 session 时视为没有外层事务。
        """
        if session is None:
            session = self.get_session()
        if suppress_commit is None:
            suppress_commit = self._default_suppress_commit

        current = self.current_transaction
        # 只有同一个 session 上的事务才能加入，其他 session 另开事务
        active = current is not None and current.is_active and current.session is session

        if propagation == TransactionPropagation.REQUIRED and active:
            with self._join(current, "REQUIRED") as tx:
                yield tx
            return

        if propagation == TransactionPropagation.MANDATORY:
            if not active:
                raise PropagationError("MANDATORY", "必须在事务中执行")
            with self._join(current, "MANDATORY") as tx:
                yield tx
            return

        if propagation == TransactionPropagation.NESTED and not active:
            raise PropagationError("NESTED", "NESTED 需要一个活跃的外层事务")

        if propagation in (TransactionPropagation.NESTED, TransactionPropagation.REQUIRES_NEW) and active:
            logger.debug(f"{propagation.value.upper()}: 在现有事务中创建 savepoint")
            with current.savepoint():
                yield current
            return

        ctx = TransactionContext(
            session=session,
            auto_commit=auto_commit,
            propagation=propagation,
            suppress_commit=suppress_commit
        )
        for hook_type, funcs in self._global_hooks.items():
            for func in funcs:
                ctx.hooks.register(hook_type, func)

        token = _current_transaction.set(ctx)
        try:
            with ctx:
                yield ctx
        finally:
            _current_transaction.reset(token)

    def transactional(
        self,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        suppress_commit: bool = None
    ):
        """事务装饰器

        使用示例:
            @tm.transactional()
            def sync_banner_order(items):
                Banner.reorder_batch(items)
                Banner.reorder_single(items[0]["id"], 1)
        """
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @wraps(func)
            def wrapper(*args, **kwargs) -> T:
                with self.transaction(
                    propagation=propagation,
                    suppress_commit=suppress_commit
                ):
                    return func(*args, **kwargs)
            return wrapper
        return decorator


# 全局单例
transaction_manager = TransactionManager()
