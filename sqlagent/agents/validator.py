"""
QueryGuard

Rule-based gate in front of the database. No LLM calls.

Rejects statements containing mutating keywords anywhere in their text
(string literals included) and caps plain SELECTs with a row limit.
"""

import logging

import sqlparse

from sqlagent.models.agent import QueryValidationError

logger = logging.getLogger(__name__)

PROHIBITED_KEYWORDS: tuple[str, ...] = (
    "DROP",
    "DELETE",
    "TRUNCATE",
    "ALTER",
    "CREATE",
    "INSERT",
    "UPDATE",
)

AGGREGATE_MARKERS: tuple[str, ...] = ("COUNT(", "SUM(", "AVG(", "GROUP BY")


class QueryGuard:
    """Validate and minimally rewrite SQL before execution."""

    name = "QueryGuard"

    def __init__(self, default_limit: int = 100):
        self.default_limit = default_limit

    def validate(self, sql: str) -> str:
        """
        Return the statement to execute.

        Raises:
            QueryValidationError: Empty input or a prohibited keyword
        """
        if not sql or not sql.strip():
            raise QueryValidationError(agent=self.name, message="Query is required")

        upper = sql.upper()
        for keyword in PROHIBITED_KEYWORDS:
            if keyword in upper:
                logger.warning(
                    f"Rejected query with prohibited keyword {keyword}",
                    extra={"keyword": keyword, "query": sql[:200]},
                )
                raise QueryValidationError(
                    agent=self.name,
                    message=f"Query contains prohibited keyword: {keyword}",
                    context={"keyword": keyword},
                )

        if "SELECT" in upper and "LIMIT" not in upper:
            if not any(marker in upper for marker in AGGREGATE_MARKERS):
                return f"{self._strip_terminator(sql)} LIMIT {self.default_limit}"

        return sql

    @staticmethod
    def _strip_terminator(sql: str) -> str:
        statements = [statement for statement in sqlparse.split(sql) if statement.strip()]
        if len(statements) != 1:
            return sql
        return statements[0].strip().rstrip(";").rstrip()
