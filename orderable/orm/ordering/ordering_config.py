"""
排序行为全局配置管理

提供全局配置接口，用于设置批量重排序的默认严格模式和约定排序字段名。
"""

from typing import Optional

from orderable.config import OrderingSettings


class OrderingConfig:
    """排序行为全局配置类

    使用类变量存储全局配置：
    - strict_batch: reorder_batch(strict=None) 的默认值
    - default_field: 未声明 __ordering_field__ 的模型使用的排序字段名

    应在模型首次使用前完成配置，之后不应再修改 default_field。
    """

    _settings: OrderingSettings = OrderingSettings()

    @classmethod
    def configure(
        cls,
        settings: Optional[OrderingSettings] = None,
        **overrides
    ) -> OrderingSettings:
        """配置全局排序行为

        Args:
            settings: OrderingSettings 实例，不传则从环境变量和默认值构建
            **overrides: 覆盖的字段，如 strict_batch=True

        Raises:
            ValueError: default_field 为空

        Examples:
            >>> configure_ordering(strict_batch=True)
            >>> configure_ordering(settings.ordering)
        """
        base = settings if settings is not None else OrderingSettings()
        if overrides:
            base = base.model_copy(update=overrides)
        if not base.default_field:
            raise ValueError("default_field 不能为空")
        cls._settings = base
        return base

    @classmethod
    def get_settings(cls) -> OrderingSettings:
        return cls._settings

    @classmethod
    def reset(cls):
        """重置为默认配置（主要用于测试）"""
        cls._settings = OrderingSettings()


def configure_ordering(settings: Optional[OrderingSettings] = None, **overrides) -> OrderingSettings:
    """配置全局排序行为（便捷函数）"""
    return OrderingConfig.configure(settings, **overrides)


def get_ordering_settings() -> OrderingSettings:
    """获取当前排序配置"""
    return OrderingConfig.get_settings()


__all__ = [
    "OrderingConfig",
    "configure_ordering",
    "get_ordering_settings",
]
