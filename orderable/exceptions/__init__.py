"""异常处理模块

使用示例:
    from orderable.exceptions import Err, ValidationException

    try:
        Banner.reorder_batch(items, strict=True)
    except ValidationException as e:
        print(e.details)
"""

from .exceptions import (
    Err,
    ErrorCode,
    ErrorCodeType,
    BusinessException,
    ValidationException,
    OrderingConfigError,
)

__all__ = [
    "Err",
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "ValidationException",
    "OrderingConfigError",
]
