# 数据库连接和事务管理

import sqlite3
import logging
import os
from contextlib import contextmanager
from typing import Any, List


class DatabaseManager:
    """
    数据库管理器

    负责SQLite连接管理、事务处理和基础查询
    """

    def __init__(self, db_path: str, auto_connect: bool = False):
        """
        初始化数据库管理器

        Args:
            db_path: 数据库文件路径，":memory:" 表示内存数据库
            auto_connect: 是否自动连接数据库
        """
        self.db_path = db_path
        self.conn = None
        self._is_connected = False

        self.logger = logging.getLogger(self.__class__.__name__)

        if auto_connect:
            self.connect()

    def connect(self) -> sqlite3.Connection:
        """
        建立数据库连接

        Raises:
            ConnectionError: 连接失败时抛出异常
        """
        try:
            if self.conn is not None:
                self.logger.warning("数据库连接已存在，先关闭现有连接")
                self.close()

            db_dir = os.path.dirname(self.db_path)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)
                self.logger.info(f"创建数据库目录: {db_dir}")

            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self._is_connected = True
            self.logger.info(f"成功连接到数据库: {self.db_path}")

            self._configure_database()

            return self.conn

        except sqlite3.Error as e:
            self.logger.error(f"连接数据库失败: {str(e)}")
            raise ConnectionError(f"无法连接到数据库 {self.db_path}: {str(e)}")

    def close(self):
        if self.conn is not None:
            try:
                self.conn.close()
                self.logger.info("数据库连接已关闭")
            except sqlite3.Error as e:
                self.logger.error(f"关闭数据库连接时发生错误: {str(e)}")
            finally:
                self.conn = None
                self._is_connected = False

    def _configure_database(self):
        try:
            optimizations = [
                "PRAGMA synchronous = NORMAL",
                "PRAGMA temp_store = MEMORY"
            ]
            if self.db_path != ":memory:":
                optimizations.append("PRAGMA journal_mode = WAL")

            for opt in optimizations:
                self.conn.execute(opt)

            self.logger.debug("数据库参数配置完成")

        except sqlite3.Error as e:
            self.logger.warning(f"配置数据库参数时出现警告: {str(e)}")

    def is_connected(self) -> bool:
        return self._is_connected and self.conn is not None

    def ensure_connected(self):
        """
        确保数据库连接可用

        Raises:
            ConnectionError: 连接不可用时抛出异常
        """
        if not self.is_connected():
            raise ConnectionError("数据库未连接，请先调用connect()方法")

    def execute_single(self, query: str, params: List = None) -> Any:
        """
        执行单个SQL语句，写操作自动提交

        Args:
            query: SQL语句
            params: 参数

        Returns:
            游标
        """
        self.ensure_connected()

        try:
            if params:
                result = self.conn.execute(query, params)
            else:
                result = self.conn.execute(query)

            if query.strip().upper().startswith(('CREATE', 'DROP', 'ALTER', 'INSERT', 'UPDATE', 'DELETE')):
                self.conn.commit()

            return result

        except sqlite3.Error as e:
            self.logger.error(f"执行SQL失败: {query[:100]}..., 错误: {str(e)}")
            raise

    @contextmanager
    def transaction(self):
        """
        事务上下文管理器

        Usage:
            with db_manager.transaction() as conn:
                conn.execute("INSERT ...")
        """
        self.ensure_connected()

        try:
            self.logger.debug("手动事务开始")
            yield self.conn
            self.conn.commit()
            self.logger.debug("手动事务提交成功")
        except Exception as e:
            self.logger.error(f"手动事务执行失败: {str(e)}")
            try:
                self.conn.rollback()
                self.logger.debug("手动事务已回滚")
            except sqlite3.Error as rollback_error:
                self.logger.error(f"手动事务回滚失败: {str(rollback_error)}")
            raise

    def __enter__(self):
        if not self.is_connected():
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
