"""
MySQL Connector

Async-compatible MySQL connector using mysql-connector-python.

The underlying driver is synchronous, so query and schema operations are
executed in worker threads via asyncio.to_thread. Connections come from a
MySQLConnectionPool; an asyncio.Semaphore sized to the pool makes callers
wait for a free connection instead of failing on pool exhaustion.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import time
from typing import Any

from mysql.connector import Error as MySQLError
from mysql.connector import errorcode, pooling

from sqlagent.connectors.base import (
    BaseConnector,
    ColumnInfo,
    ConnectionError,
    QueryError,
    QueryResult,
    SchemaError,
    TableInfo,
)
from sqlagent.models.agent import ErrorKind

logger = logging.getLogger(__name__)

TRANSIENT_ERROR_CODES = frozenset({"ECONNRESET", "PROTOCOL_CONNECTION_LOST", "ETIMEDOUT", "EPIPE"})

_MYSQL_ERRNO_CODES: dict[int, tuple[str, ErrorKind]] = {
    errorcode.CR_SERVER_LOST: ("PROTOCOL_CONNECTION_LOST", ErrorKind.TRANSIENT),
    errorcode.CR_SERVER_GONE_ERROR: ("PROTOCOL_CONNECTION_LOST", ErrorKind.TRANSIENT),
    errorcode.CR_SERVER_LOST_EXTENDED: ("PROTOCOL_CONNECTION_LOST", ErrorKind.TRANSIENT),
    errorcode.CR_CONN_HOST_ERROR: ("ECONNREFUSED", ErrorKind.UNKNOWN),
    errorcode.CR_UNKNOWN_HOST: ("ENOTFOUND", ErrorKind.UNKNOWN),
    errorcode.ER_NO_SUCH_TABLE: ("ER_NO_SUCH_TABLE", ErrorKind.SEMANTIC_SCHEMA),
    errorcode.ER_BAD_FIELD_ERROR: ("ER_BAD_FIELD_ERROR", ErrorKind.SEMANTIC_SCHEMA),
    errorcode.ER_PARSE_ERROR: ("ER_PARSE_ERROR", ErrorKind.UNKNOWN),
}

_OS_ERRNO_CODES: dict[int, str] = {
    errno.ECONNRESET: "ECONNRESET",
    errno.EPIPE: "EPIPE",
    errno.ETIMEDOUT: "ETIMEDOUT",
}


def classify_error(exc: BaseException) -> tuple[str | None, ErrorKind]:
    """Map a driver or socket exception onto a stable code and ErrorKind."""
    if isinstance(exc, ConnectionResetError):
        return "ECONNRESET", ErrorKind.TRANSIENT
    if isinstance(exc, BrokenPipeError):
        return "EPIPE", ErrorKind.TRANSIENT
    if isinstance(exc, TimeoutError):
        return "ETIMEDOUT", ErrorKind.TRANSIENT

    if isinstance(exc, MySQLError):
        if exc.errno in _MYSQL_ERRNO_CODES:
            return _MYSQL_ERRNO_CODES[exc.errno]
        if exc.errno is not None:
            return str(exc.errno), ErrorKind.UNKNOWN
        return None, ErrorKind.UNKNOWN

    if isinstance(exc, OSError) and exc.errno in _OS_ERRNO_CODES:
        return _OS_ERRNO_CODES[exc.errno], ErrorKind.TRANSIENT

    return None, ErrorKind.UNKNOWN


def _key_role(column_key: Any) -> str:
    value = str(column_key or "").upper()
    if value == "PRI":
        return "primary"
    if value == "MUL":
        return "foreign"
    return "none"


class MySQLConnector(BaseConnector):
    """MySQL database connector using a mysql-connector-python pool."""

    def __init__(
        self,
        host: str,
        port: int = 3306,
        database: str = "",
        user: str = "root",
        password: str = "",
        pool_size: int = 20,
        timeout: int = 60,
        **kwargs,
    ) -> None:
        super().__init__(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            pool_size=pool_size,
            timeout=timeout,
            **kwargs,
        )
        self._pool: pooling.MySQLConnectionPool | None = None
        self._semaphore = asyncio.Semaphore(pool_size)
        self._pool_generation = 0

    async def connect(self) -> None:
        """Create the connection pool and check that the server answers."""
        if self._connected:
            return
        try:
            self._pool = await asyncio.to_thread(self._create_pool_sync)
            await asyncio.to_thread(self._test_connection_sync, self._pool)
            self._connected = True
            logger.info(
                f"MySQL pool ready ({self.pool_size} connections)",
                extra={"host": self.host, "database": self.database},
            )
        except (MySQLError, OSError) as exc:
            code, kind = classify_error(exc)
            logger.error(f"MySQL connection failed: {exc}")
            raise ConnectionError(f"Failed to connect to MySQL: {exc}", code=code, kind=kind) from exc

    async def execute(
        self,
        query: str,
        params: list[Any] | dict[str, Any] | None = None,
        timeout: int | None = None,
    ) -> QueryResult:
        """Execute SQL query on a pooled connection and return rows."""
        if not self._connected or self._pool is None:
            raise ConnectionError("Not connected to database. Call connect() first.")

        start_time = time.perf_counter()
        async with self._semaphore:
            pool = self._pool
            try:
                rows, columns = await asyncio.to_thread(
                    self._execute_sync,
                    pool,
                    query,
                    params,
                    timeout,
                )
            except (MySQLError, OSError) as exc:
                code, kind = classify_error(exc)
                logger.error(
                    f"MySQL query failed: {exc}\nQuery: {query[:200]}...",
                    extra={"error_code": code, "error_kind": kind.value},
                )
                raise QueryError(str(exc), code=code, kind=kind) from exc

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        return QueryResult(
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=execution_time_ms,
        )

    async def get_schema(self, schema_name: str | None = None) -> list[TableInfo]:
        """Introspect tables, columns and comments via information_schema."""
        if not self._connected or self._pool is None:
            raise ConnectionError("Not connected to database. Call connect() first.")
        target_schema = schema_name or self.database
        async with self._semaphore:
            try:
                return await asyncio.to_thread(self._get_schema_sync, self._pool, target_schema)
            except (MySQLError, OSError) as exc:
                code, kind = classify_error(exc)
                logger.error(f"MySQL schema introspection failed: {exc}")
                raise SchemaError(
                    f"Failed to introspect schema: {exc}", code=code, kind=kind
                ) from exc

    async def reset_pool(self) -> None:
        """
        Tear down the pool and build a fresh one.

        Idle connections of the old pool are closed first; connections still
        checked out go back to the old pool when released.
        """
        logger.warning(
            "Recreating MySQL connection pool",
            extra={"generation": self._pool_generation + 1},
        )
        if self._pool is not None:
            await self._drain_pool(self._pool)
        try:
            self._pool = await asyncio.to_thread(self._create_pool_sync)
        except (MySQLError, OSError) as exc:
            code, kind = classify_error(exc)
            self._connected = False
            raise ConnectionError(
                f"Failed to recreate MySQL pool: {exc}", code=code, kind=kind
            ) from exc
        self._connected = True

    async def close(self) -> None:
        """Close idle pooled connections and mark the connector closed."""
        if self._pool is not None:
            await self._drain_pool(self._pool)
        self._pool = None
        self._connected = False

    @staticmethod
    async def _drain_pool(pool: pooling.MySQLConnectionPool) -> None:
        try:
            closed = await asyncio.to_thread(pool._remove_connections)
            logger.debug(f"Closed {closed} idle MySQL connections")
        except (MySQLError, OSError) as exc:
            logger.warning(f"Failed to close pooled MySQL connections: {exc}")

    def _connection_kwargs(self) -> dict[str, Any]:
        kwargs = {
            "host": self.host,
            "port": self.port,
            "database": self.database or None,
            "user": self.user,
            "password": self.password,
            "autocommit": True,
            "connection_timeout": self.timeout,
        }
        kwargs.update(self.kwargs)
        return kwargs

    def _create_pool_sync(self) -> pooling.MySQLConnectionPool:
        self._pool_generation += 1
        return pooling.MySQLConnectionPool(
            pool_name=f"sqlagent_{id(self)}_{self._pool_generation}",
            pool_size=self.pool_size,
            pool_reset_session=True,
            **self._connection_kwargs(),
        )

    @staticmethod
    def _test_connection_sync(pool: pooling.MySQLConnectionPool) -> None:
        conn = pool.get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute("SELECT VERSION()")
                cursor.fetchone()
            finally:
                cursor.close()
        finally:
            conn.close()

    @staticmethod
    def _execute_sync(
        pool: pooling.MySQLConnectionPool,
        query: str,
        params: list[Any] | dict[str, Any] | None,
        query_timeout: int | None,
    ) -> tuple[list[dict[str, Any]], list[str]]:
        conn = pool.get_connection()
        try:
            cursor = conn.cursor(dictionary=True)
            try:
                if query_timeout:
                    # Session variable is cleared when the pool resets the session.
                    cursor.execute(
                        "SET SESSION max_execution_time = %s", (int(query_timeout * 1000),)
                    )
                if params is None:
                    cursor.execute(query)
                elif isinstance(params, dict):
                    cursor.execute(query, params)
                else:
                    cursor.execute(query, tuple(params))
                if cursor.with_rows:
                    rows = cursor.fetchall()
                    columns = (
                        list(rows[0].keys()) if rows else [col[0] for col in cursor.description]
                    )
                    return rows, columns
                return [], []
            finally:
                cursor.close()
        finally:
            conn.close()

    @staticmethod
    def _get_schema_sync(pool: pooling.MySQLConnectionPool, schema_name: str) -> list[TableInfo]:
        conn = pool.get_connection()
        try:
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(
                    """
                    SELECT TABLE_NAME AS table_name, TABLE_COMMENT AS table_comment
                    FROM INFORMATION_SCHEMA.TABLES
                    WHERE TABLE_SCHEMA = %s
                    """,
                    (schema_name,),
                )
                tables = cursor.fetchall()

                table_infos: list[TableInfo] = []
                for table_row in tables:
                    table_name = str(table_row["table_name"])
                    cursor.execute(
                        """
                        SELECT
                            COLUMN_NAME AS column_name,
                            DATA_TYPE AS data_type,
                            IS_NULLABLE AS is_nullable,
                            COLUMN_KEY AS column_key,
                            COLUMN_DEFAULT AS column_default,
                            COLUMN_COMMENT AS column_comment
                        FROM INFORMATION_SCHEMA.COLUMNS
                        WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
                        ORDER BY ORDINAL_POSITION
                        """,
                        (schema_name, table_name),
                    )
                    columns = tuple(
                        ColumnInfo(
                            name=str(col["column_name"]),
                            data_type=str(col["data_type"]),
                            is_nullable=str(col["is_nullable"]).upper() == "YES",
                            key_role=_key_role(col["column_key"]),
                            default_value=(
                                str(col["column_default"])
                                if col["column_default"] is not None
                                else None
                            ),
                            comment=col["column_comment"] or None,
                        )
                        for col in cursor.fetchall()
                    )
                    table_infos.append(
                        TableInfo(
                            table_name=table_name,
                            comment=table_row["table_comment"] or None,
                            columns=columns,
                        )
                    )
                return table_infos
            finally:
                cursor.close()
        finally:
            conn.close()
