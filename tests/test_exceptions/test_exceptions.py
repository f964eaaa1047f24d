"""测试业务异常类"""

from http import HTTPStatus

import pytest

from orderable.exceptions import (
    Err,
    ErrorCode,
    BusinessException,
    ValidationException,
    OrderingConfigError,
)


class TestBusinessException:
    """测试 BusinessException 基类"""

    def test_basic_exception(self):
        """测试基本异常创建"""
        exc = BusinessException("测试错误")

        assert str(exc) == "测试错误"
        assert exc.message == "测试错误"
        assert exc.code == "BUSINESS_ERROR"
        assert exc.status_code == HTTPStatus.BAD_REQUEST
        assert exc.details == []
        assert exc.extra == {}

    def test_exception_with_extra(self):
        """测试带额外上下文的异常"""
        exc = BusinessException("测试错误", model="Banner", field="display_order")

        assert exc.extra == {"model": "Banner", "field": "display_order"}

    def test_to_dict_copies_details(self):
        """测试转换为字典时复制详细信息"""
        details = ["第 0 项缺少 id"]
        exc = BusinessException("测试错误", code=ErrorCode.OPERATION_FAILED, details=details)

        data = exc.to_dict()
        data["details"].append("x")

        assert data["code"] == ErrorCode.OPERATION_FAILED
        assert data["status_code"] == 400
        assert exc.details == ["第 0 项缺少 id"]

    def test_repr(self):
        exc = BusinessException("失败")
        assert repr(exc).startswith("BusinessException(message='失败'")


class TestSubclasses:
    """测试异常子类"""

    def test_validation_exception(self):
        exc = ValidationException(details=["第 1 项缺少 display_order"])

        assert isinstance(exc, BusinessException)
        assert exc.status_code == 422
        assert exc.code == ErrorCode.VALIDATION_ERROR
        assert exc.message == "数据验证失败"

    def test_ordering_config_error(self):
        exc = OrderingConfigError(model="Banner")

        assert exc.status_code == 500
        assert exc.code == ErrorCode.INVALID_ORDERING_FIELD
        assert exc.extra["model"] == "Banner"

    def test_error_code_is_str(self):
        """测试错误代码可直接作为字符串比较"""
        assert ErrorCode.MISSING_ORDERING_VALUE == "MISSING_ORDERING_VALUE"


class TestErr:
    """测试 Err 快捷类"""

    @pytest.mark.parametrize("factory, expected_type, status", [
        (Err.invalid, ValidationException, 422),
        (Err.config, OrderingConfigError, 500),
        (Err.fail, BusinessException, 400),
    ])
    def test_factories(self, factory, expected_type, status):
        exc = factory("消息")

        assert type(exc) is expected_type
        assert exc.message == "消息"
        assert exc.status_code == status

    def test_invalid_with_code_and_details(self):
        exc = Err.invalid("批量排序数据不完整", code=ErrorCode.MISSING_ORDERING_VALUE, details=["a"])

        assert exc.code == ErrorCode.MISSING_ORDERING_VALUE
        assert exc.details == ["a"]
