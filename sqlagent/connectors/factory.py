"""Connector factory for the configured database URL."""

from __future__ import annotations

from urllib.parse import unquote, urlparse

from sqlagent.connectors.base import BaseConnector
from sqlagent.connectors.mysql import MySQLConnector

_MYSQL_SCHEMES = {"mysql"}


def infer_database_type(database_url: str) -> str:
    """Infer logical database type from connection URL scheme."""
    parsed = urlparse(database_url)
    scheme = parsed.scheme.split("+")[0].lower()
    if scheme in _MYSQL_SCHEMES:
        return "mysql"
    raise ValueError(f"Unsupported database URL scheme: {parsed.scheme}")


def create_connector(
    *,
    database_url: str,
    pool_size: int = 20,
    timeout: int = 60,
    **kwargs,
) -> BaseConnector:
    """Create a connector instance from a database URL."""
    parsed = urlparse(database_url)
    if not parsed.hostname:
        raise ValueError("Invalid database URL: host is required.")

    target_type = infer_database_type(database_url)
    if target_type == "mysql":
        return MySQLConnector(
            host=parsed.hostname,
            port=parsed.port or 3306,
            database=parsed.path.lstrip("/"),
            user=unquote(parsed.username or "root"),
            password=unquote(parsed.password or ""),
            pool_size=pool_size,
            timeout=timeout,
            **kwargs,
        )

    raise ValueError(f"Unsupported database type: {target_type}")
