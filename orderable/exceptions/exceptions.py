"""业务异常类定义

定义排序扩展使用的异常类体系。
"""

import copy
from enum import Enum
from http import HTTPStatus
from typing import Optional, List, Any, Dict, Union


class ErrorCode(str, Enum):
    """错误代码枚举

    继承自 str，可以直接作为字符串使用。

    使用示例:
        from orderable.exceptions import ErrorCode, ValidationException

        raise ValidationException("缺少目标排序值", code=ErrorCode.MISSING_ORDERING_VALUE)
    """

    # ==================== 通用错误 ====================
    BUSINESS_ERROR = "BUSINESS_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"

    # ==================== 验证相关 (422) ====================
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    MISSING_ORDERING_VALUE = "MISSING_ORDERING_VALUE"

    # ==================== 配置相关 (500) ====================
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_ORDERING_FIELD = "INVALID_ORDERING_FIELD"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    属性:
        message: 错误消息（面向用户）
        code: 错误代码（用于程序判断，支持 ErrorCode 枚举或字符串）
        status_code: HTTP 状态码（供上层 Web 框架转换响应时使用）
        details: 详细错误信息列表
        extra: 额外的上下文信息

    使用示例:
        raise BusinessException("操作失败", code=ErrorCode.OPERATION_FAILED)

        raise BusinessException(
            message="数据验证失败",
            code=ErrorCode.VALIDATION_ERROR,
            details=["第 2 项缺少 id"]
        )
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.BUSINESS_ERROR,
        status_code: int = HTTPStatus.BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message
        self.code = code
        self.status_code = int(status_code)
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式

        Returns:
            包含异常信息的字典
        """
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )


class ValidationException(BusinessException):
    """数据验证异常

    使用示例:
        raise ValidationException(
            "批量排序数据不完整",
            code=ErrorCode.MISSING_ORDERING_VALUE,
            details=["第 1 项缺少 display_order"]
        )
    """

    def __init__(
        self,
        message: str = "数据验证失败",
        code: ErrorCodeType = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details=details,
            **extra
        )


class OrderingConfigError(BusinessException):
    """排序配置错误

    模型声明的 __ordering_field__ 不是已映射的列属性时抛出。
    """

    def __init__(
        self,
        message: str = "排序字段配置错误",
        code: ErrorCodeType = ErrorCode.INVALID_ORDERING_FIELD,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            details=details,
            **extra
        )


class Err:
    """异常快捷创建类

    使用示例:
        from orderable.exceptions import Err

        raise Err.invalid("批量排序数据不完整", details=["第 0 项缺少 id"])
        raise Err.config("Banner 未定义排序字段 priority", model="Banner")
        raise Err.fail("操作失败")
    """

    @staticmethod
    def invalid(message: str = "数据验证失败", **kwargs) -> ValidationException:
        """数据验证失败 (422)"""
        return ValidationException(message, **kwargs)

    @staticmethod
    def config(message: str = "排序字段配置错误", **kwargs) -> OrderingConfigError:
        """排序配置错误 (500)"""
        return OrderingConfigError(message, **kwargs)

    @staticmethod
    def fail(message: str = "操作失败", **kwargs) -> BusinessException:
        """通用业务异常 (400)"""
        return BusinessException(message, **kwargs)
