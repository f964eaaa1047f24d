"""唯一索引探测

通过 SQLAlchemy Inspector 读取数据库中实际存在的索引和唯一约束，
而不是模型上声明的元数据。
"""

from typing import Optional

from sqlalchemy import inspect as sa_inspect


def unique_column_sets(bind, table_name: str, schema: Optional[str] = None) -> list:
    """返回表上所有唯一索引/唯一约束覆盖的列名列表

    Returns:
        列表，每个元素为一个唯一索引（或约束）包含的列名列表
    """
    inspector = sa_inspect(bind)
    result = []
    for index in inspector.get_indexes(table_name, schema=schema):
        if index.get("unique"):
            result.append([c for c in index.get("column_names") or [] if c])
    for constraint in inspector.get_unique_constraints(table_name, schema=schema):
        result.append([c for c in constraint.get("column_names") or [] if c])
    return result


def column_has_unique_index(bind, table_name: str, column_name: str, schema: Optional[str] = None) -> bool:
    """列是否被某个唯一索引或唯一约束覆盖（联合索引也算）"""
    return any(column_name in columns for columns in unique_column_sets(bind, table_name, schema))


__all__ = [
    "unique_column_sets",
    "column_has_unique_index",
]
