"""
Orderable - SQLAlchemy 模型排序扩展

为 ORM 模型提供排序位置管理：有序查询、下一个排序值分配、
唯一索引探测，以及批量/单条重排序
"""

from .version import __version__, __author__, __description__

# 导出ORM基类与排序行为
from .orm import (
    Base,
    IdModel,
    CoreModel,
    OrderFieldMixin,
    OrderableMixin,
    configure_ordering,
    get_ordering_settings,
    init_database,
    get_engine,
    db_session_scope,
    close_session,
    transaction_manager,
    TransactionPropagation,
)

# 导出配置
from .config import (
    AppSettings,
    DatabaseSettings,
    LoggingSettings,
    OrderingSettings,
    ConfigLoader,
    load_yaml_config,
)

# 导出异常
from .exceptions import (
    Err,
    ErrorCode,
    BusinessException,
    ValidationException,
    OrderingConfigError,
)

# 导出日志
from .log import (
    get_logger,
    setup_logger,
    setup_root_logger,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",

    # ORM
    "Base",
    "IdModel",
    "CoreModel",
    "OrderFieldMixin",
    "OrderableMixin",
    "configure_ordering",
    "get_ordering_settings",
    "init_database",
    "get_engine",
    "db_session_scope",
    "close_session",
    "transaction_manager",
    "TransactionPropagation",

    # 配置
    "AppSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "OrderingSettings",
    "ConfigLoader",
    "load_yaml_config",

    # 异常
    "Err",
    "ErrorCode",
    "BusinessException",
    "ValidationException",
    "OrderingConfigError",

    # 日志
    "get_logger",
    "setup_logger",
    "setup_root_logger",
]
