"""
Table selection

Narrows a category's candidate tables down to the few that go into the
SQL generation prompt. Scoring is pluggable through TableScorer so a
semantic matcher can replace the keyword heuristics.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from sqlagent.catalog.categories import KEYWORD_TABLE_MAP
from sqlagent.catalog.schema import SchemaCatalog
from sqlagent.connectors.base import TableInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class TableScorer(Protocol):
    """Relevance of one table to a lowercased question; 0 means irrelevant."""

    def score(self, question_lower: str, table_name: str, schema: TableInfo) -> int: ...


class KeywordTableScorer:
    """Substring heuristics over table and column names."""

    def score(self, question_lower: str, table_name: str, schema: TableInfo) -> int:
        score = 0
        name = table_name.lower()
        if name in question_lower:
            score += 20

        for part in name.split("_"):
            if len(part) > 3 and part in question_lower:
                score += 10

        asks_count = "how many" in question_lower or "count" in question_lower
        mentions_name = "name" in question_lower
        for column in schema.columns:
            column_name = column.name.lower()
            if column_name in question_lower:
                score += 8
            if "name" in column_name and mentions_name:
                score += 5
            if "count" in column_name and asks_count:
                score += 5

        return score


class TableSelector:
    """
    Pick at most ``max_tables`` tables for a question.

    Order of precedence: direct keyword hits, then scored tables, then the
    ``projects`` table for project or counting questions, then the first
    candidate so the result is never empty when candidates exist.
    """

    def __init__(
        self,
        catalog: SchemaCatalog,
        scorer: TableScorer | None = None,
        max_tables: int = 3,
        keyword_tables: Mapping[str, Sequence[str]] = KEYWORD_TABLE_MAP,
    ):
        self.catalog = catalog
        self.scorer = scorer or KeywordTableScorer()
        self.max_tables = max_tables
        self.keyword_tables = keyword_tables

    def select(self, question: str, candidate_tables: Sequence[str]) -> list[str]:
        question_lower = question.lower()
        candidates = set(candidate_tables)
        selected: dict[str, None] = {}

        for keyword, tables in self.keyword_tables.items():
            if keyword in question_lower:
                for table in tables:
                    if table in candidates:
                        selected[table] = None

        if not selected:
            scored: list[tuple[str, int]] = []
            for table_name in candidate_tables:
                schema = self.catalog.get(table_name)
                if schema is None:
                    continue
                score = self.scorer.score(question_lower, table_name, schema)
                if score > 0:
                    scored.append((table_name, score))
            # Stable sort keeps candidate order among equal scores
            scored.sort(key=lambda item: item[1], reverse=True)
            for table_name, _ in scored[: self.max_tables]:
                selected[table_name] = None

        if ("project" in question_lower or "how many" in question_lower) and "projects" in candidates:
            selected["projects"] = None

        if not selected and candidate_tables:
            selected[candidate_tables[0]] = None

        result = list(selected)[: self.max_tables]
        logger.info(
            f"Table selection for \"{question}\": {', '.join(result)}",
            extra={"tables": result},
        )
        return result
