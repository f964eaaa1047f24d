"""版本信息"""

__version__ = "0.1.0"
__author__ = "orderable contributors"
__description__ = "SQLAlchemy 模型排序扩展：有序查询、批量重排序、单项移动"
