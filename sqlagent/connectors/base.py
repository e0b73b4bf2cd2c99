"""
Base Database Connector

Abstract base class for database connectors. Provides a consistent
async interface for connecting to, querying, and introspecting databases.

All connectors must implement:
- connect(): Establish connection with connection pooling
- execute(): Run queries with parameters and timeout
- get_schema(): Introspect database schema (tables, columns, comments)
- reset_pool(): Tear down and recreate the connection pool
- close(): Clean up connections and pools
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from sqlagent.models.agent import ErrorKind

logger = logging.getLogger(__name__)


# ============================================================================
# Data Models
# ============================================================================


class ColumnInfo(BaseModel):
    """Information about a database column."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Column data type")
    is_nullable: bool = Field(default=True, description="Whether column can be NULL")
    key_role: Literal["none", "primary", "foreign"] = Field(
        default="none", description="Primary/foreign key role"
    )
    default_value: str | None = Field(None, description="Default value if any")
    comment: str | None = Field(None, description="Column comment")

    model_config = ConfigDict(frozen=True)

    @property
    def is_primary_key(self) -> bool:
        return self.key_role == "primary"

    @property
    def is_foreign_key(self) -> bool:
        return self.key_role == "foreign"


class TableInfo(BaseModel):
    """Information about a database table."""

    table_name: str = Field(..., description="Table name")
    comment: str | None = Field(None, description="Table comment")
    columns: tuple[ColumnInfo, ...] = Field(default=(), description="Columns in ordinal order")

    model_config = ConfigDict(frozen=True)


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[dict[str, Any]] = Field(..., description="Query result rows")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(..., description="Column names")
    execution_time_ms: float = Field(..., description="Query execution time in ms")


class ConnectorError(Exception):
    """
    Base exception for connector errors.

    Attributes:
        code: Normalised driver error code (e.g. ER_NO_SUCH_TABLE, ECONNRESET)
        kind: Failure class used by retry and message mapping
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        kind: ErrorKind = ErrorKind.UNKNOWN,
    ):
        super().__init__(message)
        self.code = code
        self.kind = kind

    @property
    def is_transient(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT


class ConnectionError(ConnectorError):
    """Error establishing or managing database connection."""

    pass


class QueryError(ConnectorError):
    """Error executing database query."""

    pass


class SchemaError(ConnectorError):
    """Error introspecting database schema."""

    pass


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    Features:
    - Async interface throughout
    - Connection pooling support
    - Query timeout configuration
    - Schema introspection
    - Parameterized query execution
    - Automatic resource cleanup

    Usage:
        connector = MySQLConnector(host="localhost", ...)
        await connector.connect()

        result = await connector.execute("SELECT * FROM company WHERE companyId = %s", ["42"])
        print(f"Found {result.row_count} rows")

        await connector.close()
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        pool_size: int = 10,
        timeout: int = 30,
        **kwargs,
    ):
        """
        Initialize connector.

        Args:
            host: Database host
            port: Database port
            database: Database/schema name
            user: Database user
            password: Database password
            pool_size: Connection pool size (default: 10)
            timeout: Query timeout in seconds (default: 30)
            **kwargs: Additional connector-specific parameters
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.pool_size = pool_size
        self.timeout = timeout
        self.kwargs = kwargs

        self._pool = None
        self._connected = False

        logger.info(f"Initialized {self.__class__.__name__} for {user}@{host}:{port}/{database}")

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish database connection and create connection pool.

        Should be idempotent - calling multiple times should not create
        multiple pools.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
        timeout: int | None = None,
    ) -> QueryResult:
        """
        Execute a SQL query.

        Args:
            query: SQL query string (use %s for parameters)
            params: Query parameters (optional)
            timeout: Query timeout in seconds (overrides default)

        Returns:
            QueryResult with rows, columns, and metadata

        Raises:
            QueryError: If query execution fails
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def get_schema(self, schema_name: str | None = None) -> list[TableInfo]:
        """
        Introspect database schema.

        Args:
            schema_name: Specific schema to introspect (None = connected database)

        Returns:
            List of TableInfo objects

        Raises:
            SchemaError: If schema introspection fails
        """
        pass

    @abstractmethod
    async def reset_pool(self) -> None:
        """
        Discard every pooled connection and build a fresh pool.

        Raises:
            ConnectionError: If the new pool cannot be created
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close database connection and clean up pool.

        Should be idempotent - safe to call multiple times.
        """
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.user}@{self.host}:{self.port}/{self.database} ({status})>"
