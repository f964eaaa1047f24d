"""事务钩子

提交、回滚前后的回调注册与执行
"""

from enum import Enum
from typing import Callable, List, Dict, Optional, TYPE_CHECKING

from orderable.log import get_logger

from .exceptions import HookExecutionError

if TYPE_CHECKING:
    from .context import TransactionContext

logger = get_logger("orderable.orm.transaction")


class TransactionHookType(str, Enum):
    """事务钩子类型"""

    BEFORE_COMMIT = "before_commit"
    """提交前（失败会阻止提交）"""

    AFTER_COMMIT = "after_commit"
    """提交后（失败不影响已提交的事务）"""

    AFTER_ROLLBACK = "after_rollback"
    """回滚后"""

    ON_ERROR = "on_error"
    """上下文内发生异常时"""


class TransactionHooks:
    """单个事务的钩子集合

    钩子函数签名为 func(ctx)，ON_ERROR 钩子为 func(ctx, error)。
    """

    def __init__(self):
        self._funcs: Dict[TransactionHookType, List[Callable]] = {
            hook_type: [] for hook_type in TransactionHookType
        }

    def register(self, hook_type: TransactionHookType, func: Callable) -> None:
        self._funcs[hook_type].append(func)

    def count(self, hook_type: TransactionHookType) -> int:
        return len(self._funcs[hook_type])

    def clear(self) -> None:
        for funcs in self._funcs.values():
            funcs.clear()

    def execute(
        self,
        hook_type: TransactionHookType,
        context: 'TransactionContext',
        error: Optional[Exception] = None,
        raise_on_error: bool = False
    ) -> List[Exception]:
        """执行指定类型的所有钩子

        Args:
            hook_type: 钩子类型
            context: 事务上下文
            error: 触发钩子的异常（仅 ON_ERROR 使用）
            raise_on_error: 钩子失败时是否抛出 HookExecutionError

        Returns:
            执行过程中发生的异常列表
        """
        errors = []
        for func in self._funcs[hook_type]:
            func_name = getattr(func, '__name__', str(func))
            try:
                if hook_type == TransactionHookType.ON_ERROR:
                    func(context, error)
                else:
                    func(context)
            except Exception as e:
                hook_error = HookExecutionError(func_name, e)
                logger.error(f"钩子函数 {func_name} 执行失败: {e}")
                if raise_on_error:
                    raise hook_error from e
                errors.append(hook_error)
        return errors
