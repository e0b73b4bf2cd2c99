"""
Schema Catalog

Read-only snapshot of the target database's tables, columns and comments,
loaded once at startup and used to build SQL generation prompts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from sqlagent.connectors.base import BaseConnector, ConnectorError, TableInfo

logger = logging.getLogger(__name__)


class SchemaCatalog(Mapping[str, TableInfo]):
    """
    Immutable mapping of table name to TableInfo.

    Usage:
        catalog = await SchemaCatalog.load(connector)
        print(catalog.describe(["company", "projects"]))
    """

    def __init__(
        self,
        tables: Iterable[TableInfo] = (),
        loaded_at: datetime | None = None,
    ) -> None:
        self._tables: Mapping[str, TableInfo] = MappingProxyType(
            {table.table_name: table for table in tables}
        )
        self.loaded_at = loaded_at

    @classmethod
    async def load(cls, connector: BaseConnector, schema_name: str | None = None) -> SchemaCatalog:
        """
        Introspect the connected database.

        A failed introspection is logged and yields an empty catalog so the
        service can still start; questions then route to the General category.
        """
        try:
            tables = await connector.get_schema(schema_name)
        except ConnectorError as exc:
            logger.error(f"Error loading table schemas: {exc}", extra={"error_code": exc.code})
            return cls(loaded_at=None)

        catalog = cls(tables, loaded_at=datetime.now(UTC))
        logger.info(f"Loaded schemas for {len(catalog)} tables")
        return catalog

    def __getitem__(self, table_name: str) -> TableInfo:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def table_names(self) -> list[str]:
        return list(self._tables)

    def describe(self, table_names: Iterable[str]) -> str:
        """Render the prompt schema block for the given tables; unknown names are skipped."""
        lines: list[str] = []
        for name in table_names:
            table = self._tables.get(name)
            if table is None:
                continue
            lines.append("")
            lines.append(f"Table: {name}")
            if table.comment:
                lines.append(f"Description: {table.comment}")
            lines.append("Columns:")
            for column in table.columns:
                line = f"  - {column.name} ({column.data_type})"
                if column.is_primary_key:
                    line += " [PRIMARY KEY]"
                if column.is_foreign_key:
                    line += " [FOREIGN KEY]"
                if column.comment:
                    line += f" // {column.comment}"
                lines.append(line)
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def summaries(self) -> list[dict[str, Any]]:
        """Per-table overview used by the tables endpoint."""
        return [
            {
                "name": table.table_name,
                "comment": table.comment,
                "columnCount": len(table.columns),
                "primaryKeys": [c.name for c in table.columns if c.is_primary_key],
                "foreignKeys": [c.name for c in table.columns if c.is_foreign_key],
            }
            for table in self._tables.values()
        ]
