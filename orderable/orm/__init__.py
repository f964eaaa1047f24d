"""ORM 模块

提供模型基类、会话管理、事务管理和排序行为。

使用示例:
    from orderable.orm import (
        CoreModel, OrderFieldMixin, OrderableMixin,
        init_database, transaction_manager,
    )

    init_database("sqlite:///./app.db")

    class Banner(CoreModel, OrderFieldMixin, OrderableMixin):
        title = mapped_column(String(100))
"""

from .id_model import Base, IdModel
from .core_model import CoreModel
from .utils import to_snake_case
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    db_session_scope,
    close_session,
)
from .transaction import (
    TransactionManager,
    TransactionContext,
    TransactionPropagation,
    TransactionState,
    TransactionError,
    PropagationError,
    transaction_manager,
    get_current_transaction,
)
from .ordering import (
    OrderFieldMixin,
    OrderableMixin,
    OrderingConfig,
    configure_ordering,
    get_ordering_settings,
)

__all__ = [
    # 模型基类
    "Base",
    "IdModel",
    "CoreModel",
    "to_snake_case",

    # 会话管理
    "db_manager",
    "init_database",
    "get_engine",
    "db_session_scope",
    "close_session",

    # 事务管理
    "TransactionManager",
    "TransactionContext",
    "TransactionPropagation",
    "TransactionState",
    "TransactionError",
    "PropagationError",
    "transaction_manager",
    "get_current_transaction",

    # 排序
    "OrderFieldMixin",
    "OrderableMixin",
    "OrderingConfig",
    "configure_ordering",
    "get_ordering_settings",
]
