"""事务管理模块

- 事务传播行为（REQUIRED, REQUIRES_NEW, NESTED, MANDATORY）
- Savepoint 支持
- 提交/回滚钩子
- 提交抑制（事务上下文中 commit=True 改为 flush）

使用示例:
    from orderable.orm import transaction_manager as tm

    with tm.transaction() as tx:
        Banner.reorder_batch(items)

        @tx.after_commit
        def on_committed(ctx):
            cache.invalidate("banners")
"""

from .state import TransactionState
from .exceptions import (
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    HookExecutionError,
    PropagationError,
)
from .propagation import TransactionPropagation
from .hooks import TransactionHookType, TransactionHooks
from .context import TransactionContext
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    "TransactionState",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "HookExecutionError",
    "PropagationError",
    "TransactionPropagation",
    "TransactionHookType",
    "TransactionHooks",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
