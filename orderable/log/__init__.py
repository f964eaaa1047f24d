"""日志模块

提供日志配置与管理：
- setup_logger / setup_root_logger: 配置日志记录器
- get_logger: 自动推断模块名的日志记录器获取函数

使用示例:
    from orderable.log import setup_root_logger, get_logger

    setup_root_logger(level="DEBUG", log_file="logs/app.log")
    logger = get_logger()
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    setup_sql_logger,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    orm_logger,
    transaction_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "setup_sql_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "orm_logger",
    "transaction_logger",
    "logger",
    "get_logger",
]
