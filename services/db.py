# services/db.py
# 关系型存储网关（SQLAlchemy Core）
# 对 handler 只暴露四个动作：
#   - prepare(sql, params?) -> Statement
#   - Statement.bind(**params) -> Statement（返回新对象）
#   - Statement.run() -> {"changes": n, "meta": {"last_row_id": id}}
#   - Statement.all() -> {"results": [dict, ...]}
#   - batch([Statement, ...]) -> 单事务内全部执行，要么全成功要么全回滚

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///student_tracker.db")
SQL_ECHO = os.environ.get("SQL_ECHO", "").lower() in ("1", "true", "yes")
AUTO_INIT_SCHEMA = os.environ.get("AUTO_INIT_SCHEMA", "true").lower() in ("1", "true", "yes")

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS students (
        account TEXT PRIMARY KEY,
        name    TEXT NOT NULL,
        school  TEXT,
        class   TEXT,
        email   TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id              INTEGER PRIMARY KEY,
        student_account TEXT NOT NULL REFERENCES students(account) ON DELETE CASCADE,
        name            TEXT,
        status          TEXT,
        teacher_comment TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id          {auto_id},
        task_id     INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        sender      TEXT,
        content     TEXT,
        timestamp   TEXT,
        is_recalled INTEGER NOT NULL DEFAULT 0,
        is_blocked  INTEGER NOT NULL DEFAULT 0
    )
    """,
]


class StorageError(Exception):
    """存储层任何失败（连接 / SQL / 约束）统一抛这个，由路由层转 500。"""


@contextmanager
def _storage_errors():
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageError(str(getattr(e, "orig", None) or e)) from e


def _rows(result) -> List[Dict[str, Any]]:
    return [dict(row._mapping) for row in result]

def _summary(result) -> Dict[str, Any]:
    if result.returns_rows:
        return {"results": _rows(result)}
    return {"changes": result.rowcount, "meta": {"last_row_id": result.lastrowid}}


class Statement:
    def __init__(self, gateway: "Gateway", sql: str, params: Optional[Dict[str, Any]] = None):
        self.gateway = gateway
        self.sql = sql
        self.params = dict(params or {})

    def bind(self, **params) -> "Statement":
        return Statement(self.gateway, self.sql, {**self.params, **params})

    def execute(self, conn):
        return conn.execute(text(self.sql), self.params)

    def run(self) -> Dict[str, Any]:
        with _storage_errors(), self.gateway.engine.begin() as conn:
            result = self.execute(conn)
            if result.returns_rows:
                # INSERT ... RETURNING id：lastrowid 在 PostgreSQL 上不可用，取返回的第一列
                rows = result.fetchall()
                return {"changes": len(rows), "meta": {"last_row_id": rows[0][0] if rows else None}}
            return {"changes": result.rowcount, "meta": {"last_row_id": result.lastrowid}}

    def all(self) -> Dict[str, Any]:
        with _storage_errors(), self.gateway.engine.connect() as conn:
            return {"results": _rows(self.execute(conn))}

    def __repr__(self):
        return f"Statement({self.sql.strip()[:60]!r}, {self.params!r})"


class Gateway:
    def __init__(self, engine: Engine):
        self.engine = engine

    def prepare(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Statement:
        return Statement(self, sql, params)

    def batch(self, statements: List[Statement]) -> List[Dict[str, Any]]:
        logger.debug("batch: %d statements", len(statements))
        with _storage_errors(), self.engine.begin() as conn:
            return [_summary(stmt.execute(conn)) for stmt in statements]


def make_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    engine = create_engine(url, echo=SQL_ECHO, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        # SQLite 默认不执行外键，级联删除依赖这一行
        @event.listens_for(engine, "connect")
        def _fk_on(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys = ON")
            cur.close()
    return engine

# comments.id 由库自动分配：SQLite 用 rowid 别名，其它库（PostgreSQL）用 SERIAL
def auto_id_column(dialect: str) -> str:
    return "INTEGER PRIMARY KEY" if dialect == "sqlite" else "SERIAL PRIMARY KEY"

def init_schema(gateway: Gateway) -> None:
    auto_id = auto_id_column(gateway.engine.dialect.name)
    gateway.batch([gateway.prepare(ddl.format(auto_id=auto_id)) for ddl in SCHEMA])


_gateway: Optional[Gateway] = None

def get_gateway() -> Gateway:
    global _gateway
    if _gateway is None:
        _gateway = Gateway(make_engine())
        if AUTO_INIT_SCHEMA:
            init_schema(_gateway)
        logger.info("storage gateway ready: %s", _gateway.engine.url.render_as_string(hide_password=True))
    return _gateway

def set_gateway(gateway: Optional[Gateway]) -> None:
    global _gateway
    _gateway = gateway
