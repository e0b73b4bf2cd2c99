"""
SQLAgent

Generates one MySQL statement for a question from the schema of the
selected tables. Model output is cleaned of Markdown fences and common
table-name mistakes. When the provider is rate limited the agent degrades
to a canned template query instead of failing the request.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from sqlagent.agents.base import BaseAgent
from sqlagent.llm.base import BaseLLMProvider, ProviderRateLimitError
from sqlagent.models.agent import GeneratedSQL, SQLGenerationError
from sqlagent.prompts.loader import PromptLoader

logger = logging.getLogger(__name__)

TABLE_ALIASES: Mapping[str, str] = {
    "companies": "company",
    "users": "contacts",
    "employees": "contacts",
    "timesheets_data": "timesheetdata",
}

_FENCE_SQL = re.compile(r"```sql\s*|\s*```", re.IGNORECASE)
_LEADING_SQL = re.compile(r"^sql\s*", re.IGNORECASE)
_ALIAS_PATTERNS = tuple(
    (re.compile(rf"\b{re.escape(wrong)}\b", re.IGNORECASE), right)
    for wrong, right in TABLE_ALIASES.items()
)


def clean_sql(raw: str) -> str:
    """Strip code fences and a leading ``sql`` token, then fix known table aliases."""
    query = _FENCE_SQL.sub("", raw.strip()).strip()
    query = _LEADING_SQL.sub("", query).strip()
    query = query.replace("```", "").strip()
    for pattern, replacement in _ALIAS_PATTERNS:
        query = pattern.sub(replacement, query)
    return query


def fallback_query(question: str, tables: Sequence[str]) -> str:
    """Template query used when the model cannot be reached."""
    question_lower = question.lower()
    table = tables[0] if tables else "company"

    if "summary" in question_lower and "master_project_ai_summary" in tables:
        return (
            "SELECT projectId, summary FROM master_project_ai_summary "
            "WHERE status = 'active' LIMIT 10"
        )

    if "how many" in question_lower or "count" in question_lower:
        return f"SELECT COUNT(*) AS count FROM {table}"

    if "list" in question_lower or "show" in question_lower:
        if table == "company":
            return "SELECT companyId, companyName, status FROM company LIMIT 20"
        if table == "projects":
            return "SELECT projectId, projectName, projectStatus FROM projects LIMIT 20"

    return f"SELECT * FROM {table} LIMIT 5"


class SQLAgent(BaseAgent):
    """
    SQL generation agent.

    Usage:
        agent = SQLAgent(llm_provider=provider, database_name="certaintiMaster")
        generated = await agent.generate(question, ["company"], catalog.describe(["company"]))
        print(generated.sql)
    """

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        database_name: str = "certaintiMaster",
        default_limit: int = 50,
        prompts: PromptLoader | None = None,
    ):
        super().__init__(name="SQLAgent", llm_provider=llm_provider)
        self.database_name = database_name
        self.default_limit = default_limit
        self.prompts = prompts or PromptLoader()

    async def generate(
        self,
        question: str,
        tables: Sequence[str],
        schema_text: str,
    ) -> GeneratedSQL:
        """
        Produce a single SQL statement.

        Raises:
            SQLGenerationError: The model failed for a reason other than rate limiting,
                or returned nothing usable
        """
        prompt = self.prompts.render(
            "agents/sql_generator.md",
            database_name=self.database_name,
            schema_info=schema_text,
            question=question,
            default_limit=self.default_limit,
        )

        try:
            raw = await self._complete(prompt)
        except ProviderRateLimitError as exc:
            logger.warning(
                f"LLM quota exceeded, using fallback query: {exc}",
                extra={"tables": list(tables)},
            )
            return GeneratedSQL(sql=fallback_query(question, tables), used_fallback=True)
        except Exception as exc:
            logger.error(f"Error generating SQL query: {exc}", exc_info=True)
            raise SQLGenerationError(
                agent=self.name,
                message="Failed to generate SQL query",
                context={"error_type": type(exc).__name__},
            ) from exc

        sql = clean_sql(raw)
        if not sql:
            raise SQLGenerationError(agent=self.name, message="Failed to generate SQL query")

        logger.info(f"Generated query: {sql}", extra={"tables": list(tables)})
        return GeneratedSQL(sql=sql)
