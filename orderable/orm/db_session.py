"""
数据库会话管理模块

提供数据库引擎创建、会话管理等功能。

公开 API:
- db_manager: 数据库管理器单例
- init_database(): 初始化数据库连接
- get_engine(): 获取数据库引擎
- db_session_scope(): 脚本/任务场景的上下文管理器
- close_session(): 提交未保存的变更并清理当前 session
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Callable, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, scoped_session, Session
from sqlalchemy.pool import StaticPool

from orderable.log import get_logger

_logger = get_logger("orderable.orm.session")

__all__ = [
    'db_manager',
    'init_database',
    'get_engine',
    'db_session_scope',
    'close_session',
]


class DatabaseManager:
    """数据库管理器（单例）

    使用示例:
        from orderable.orm import db_manager

        db_manager.init(database_url="sqlite:///./test.db")
        engine = db_manager.engine
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._engine = None
        self._session_scope = None
        self._initialized = True

    @property
    def engine(self):
        """获取数据库引擎

        Raises:
            RuntimeError: 数据库未初始化时
        """
        if self._engine is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._engine

    @property
    def session_scope(self):
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None and self._session_scope is not None

    def init(
        self,
        database_url: str = None,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        sql_log_enabled: bool = False,
        logger: logging.Logger = None,
        scopefunc: Callable = None,
        config: Any = None,
        logging_config: Any = None,
        auto_setup_query: bool = True
    ):
        """初始化数据库连接

        Args:
            database_url: 数据库连接URL（如果提供 config 则忽略）
            echo: 是否输出SQL语句（如果提供 config 则忽略）
            pool_size / max_overflow / pool_timeout / pool_recycle / pool_pre_ping:
                连接池参数（如果提供 config 则忽略，内存 SQLite 不使用）
            sql_log_enabled: 是否启用SQL日志与耗时记录（如果提供 logging_config 则忽略）
            logger: 日志记录器
            scopefunc: scoped_session 作用域函数，默认按线程隔离
            config: DatabaseSettings 配置对象
            logging_config: LoggingSettings 配置对象
            auto_setup_query: 是否自动设置 CoreModel.query 属性

        Returns:
            tuple: (engine, session_scope)

        使用示例:
            engine, session_scope = init_database(
                config=settings.database,
                logging_config=settings.logging,
            )
        """
        if config is not None:
            database_url = getattr(config, "url", database_url)
            echo = getattr(config, "echo", echo)
            pool_size = getattr(config, "pool_size", pool_size)
            max_overflow = getattr(config, "max_overflow", max_overflow)
            pool_timeout = getattr(config, "pool_timeout", pool_timeout)
            pool_recycle = getattr(config, "pool_recycle", pool_recycle)
            pool_pre_ping = getattr(config, "pool_pre_ping", pool_pre_ping)

        if logging_config is not None:
            sql_log_enabled = getattr(logging_config, "sql_log_enabled", sql_log_enabled)

        if not database_url:
            raise ValueError("database_url 是必需的，请通过参数或 config 提供")

        if logger is None:
            logger = _logger

        logger.info(f"数据库配置URL: {database_url}")
        engine_echo = "debug" if sql_log_enabled else echo

        try:
            if database_url.startswith("sqlite:///"):
                db_path = database_url[len("sqlite:///"):]
                if db_path in (":memory:", ""):
                    # 内存数据库：单连接，否则每个连接看到的是不同的库
                    self._engine = create_engine(
                        database_url,
                        echo=engine_echo,
                        connect_args={"check_same_thread": False},
                        poolclass=StaticPool,
                    )
                    logger.info("SQLite内存数据库引擎创建成功（StaticPool）")
                else:
                    logger.info(f"SQLite文件数据库路径: {os.path.abspath(db_path)}")
                    self._engine = create_engine(
                        database_url,
                        echo=engine_echo,
                        connect_args={"check_same_thread": False, "timeout": pool_timeout},
                        pool_pre_ping=pool_pre_ping,
                    )
            else:
                self._engine = create_engine(
                    database_url,
                    echo=engine_echo,
                    pool_pre_ping=pool_pre_ping,
                    pool_size=pool_size,
                    max_overflow=max_overflow,
                    pool_timeout=pool_timeout,
                    pool_recycle=pool_recycle
                )
                logger.info("数据库引擎创建成功")
        except Exception as e:
            logger.error(f"创建数据库引擎失败: {str(e)}")
            raise

        if sql_log_enabled:
            sql_logger = logging.getLogger("sqlalchemy.engine")

            @event.listens_for(self._engine, "before_cursor_execute")
            def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
                conn.info.setdefault('query_start_time', []).append(time.time())

            @event.listens_for(self._engine, "after_cursor_execute")
            def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
                total_time = time.time() - conn.info['query_start_time'].pop()
                sql_logger.debug(f"[执行耗时: {total_time*1000:.2f}ms]")

            logger.info("SQL执行时间记录已启用")

        session_maker = sessionmaker(autocommit=False, autoflush=True, bind=self._engine)
        self._session_scope = scoped_session(session_maker, scopefunc=scopefunc)

        if auto_setup_query:
            from .core_model import CoreModel
            CoreModel.query = self._session_scope.query_property()
            logger.info("CoreModel.query 属性已自动设置")

        return self._engine, self._session_scope

    def get_session(self) -> Session:
        """获取当前作用域的 session

        直接使用时需要自行提交并调用 close_session() 清理，
        推荐使用 db_session_scope()。
        """
        if self._session_scope is None:
            raise RuntimeError("数据库未初始化，请先调用 init_database()")
        return self._session_scope()

    def cleanup(self):
        """提交未保存的变更并移除 session（幂等）"""
        if self._session_scope is None or not self._session_scope.registry.has():
            _logger.debug("无活跃 session，跳过清理")
            return

        session = self._session_scope()
        if session.dirty or session.new or session.deleted:
            try:
                session.commit()
                _logger.debug("自动提交成功")
            except Exception as e:
                _logger.warning(f"自动提交失败，回滚: {e}")
                session.rollback()
        self._session_scope.remove()
        _logger.debug("session_scope 移除完成")

    def reset(self):
        """释放引擎并清空状态（测试用）"""
        if self._session_scope is not None:
            self._session_scope.remove()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_scope = None


# 全局单例
db_manager = DatabaseManager()


def init_database(
    database_url: str = None,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 3600,
    pool_pre_ping: bool = True,
    sql_log_enabled: bool = False,
    logger: logging.Logger = None,
    scopefunc: Callable = None,
    config: Any = None,
    logging_config: Any = None,
    auto_setup_query: bool = True
):
    """初始化数据库连接

    db_manager.init() 的便捷包装函数。

    Returns:
        tuple: (engine, session_scope)
    """
    return db_manager.init(
        database_url=database_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
        sql_log_enabled=sql_log_enabled,
        logger=logger,
        scopefunc=scopefunc,
        config=config,
        logging_config=logging_config,
        auto_setup_query=auto_setup_query,
    )


def get_engine():
    """获取数据库引擎"""
    return db_manager.engine


@contextmanager
def db_session_scope() -> Generator[Session, None, None]:
    """session 上下文管理器

    正常退出时提交，异常时回滚，最后移除 session。

    使用示例:
        with db_session_scope() as session:
            Banner.reorder_batch(items, session=session)
    """
    session = db_manager.get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        db_manager.session_scope.remove()


def close_session():
    """提交未保存的变更并清理当前 session"""
    db_manager.cleanup()
