"""事务异常类"""


class TransactionError(Exception):
    """事务错误基类"""
    pass


class TransactionNotActiveError(TransactionError):
    """在非活跃事务上执行提交、刷新或创建保存点时抛出"""

    def __init__(self, message: str = "事务未激活"):
        super().__init__(message)


class TransactionAlreadyCommittedError(TransactionError):
    """对已提交的事务再次提交或回滚时抛出"""

    def __init__(self, message: str = "事务已提交，无法执行此操作"):
        super().__init__(message)


class HookExecutionError(TransactionError):
    """before_commit 钩子执行失败

    包含钩子名称和原始异常
    """

    def __init__(self, hook_name: str, original_error: Exception):
        self.hook_name = hook_name
        self.original_error = original_error
        super().__init__(f"钩子 '{hook_name}' 执行失败: {original_error}")


class PropagationError(TransactionError):
    """事务传播行为不满足条件时抛出"""

    def __init__(self, propagation: str, message: str):
        self.propagation = propagation
        super().__init__(f"[{propagation}] {message}")
