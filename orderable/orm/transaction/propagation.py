"""事务传播行为

定义方法在已有事务上下文中被调用时的行为
"""

from enum import Enum


class TransactionPropagation(str, Enum):
    """事务传播行为

    使用示例:
        with tm.transaction(propagation=TransactionPropagation.NESTED):
            Banner.reorder_single(3, 1)
    """

    REQUIRED = "required"
    """有事务则加入，没有则新建（默认）

    重排序操作在调用方事务中执行时，整体随外层事务提交或回滚。
    """

    REQUIRES_NEW = "requires_new"
    """总是开启独立单元（已有事务时通过 savepoint 实现）"""

    NESTED = "nested"
    """在外层事务中创建 savepoint，没有外层事务时报错"""

    MANDATORY = "mandatory"
    """必须在事务中执行，否则抛出异常"""
