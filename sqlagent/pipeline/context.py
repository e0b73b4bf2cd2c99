"""
Application Context

Everything a request handler needs, built once at startup and torn down at
shutdown: settings, database connector, schema catalog, LLM providers, the
execution cache/history/metrics, agents, the question pipeline and the rate
limiter.

Usage:
    context = await AgentContext.create(get_settings())
    result = await context.pipeline.run("How many companies do we have?")
    await context.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlagent.agents.classifier import CategoryAgent
from sqlagent.agents.executor import ExecutorAgent, is_transient_error
from sqlagent.agents.project_summary import ProjectSummaryAgent
from sqlagent.agents.response_synthesis import ResponseAgent
from sqlagent.agents.sql import SQLAgent
from sqlagent.agents.table_selector import TableSelector
from sqlagent.agents.validator import QueryGuard
from sqlagent.catalog.schema import SchemaCatalog
from sqlagent.config import Settings
from sqlagent.connectors.base import BaseConnector
from sqlagent.connectors.factory import create_connector
from sqlagent.execution.cache import QueryCache
from sqlagent.execution.history import QueryHistory
from sqlagent.execution.metrics import ExecutionMetrics
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.llm.factory import LLMProviderFactory
from sqlagent.pipeline.orchestrator import SQLAgentPipeline
from sqlagent.prompts.loader import PromptLoader
from sqlagent.utils.rate_limit import QueryRateLimiter
from sqlagent.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class AgentContext:
    settings: Settings
    connector: BaseConnector
    catalog: SchemaCatalog
    llm: BaseLLMProvider
    sql_llm: BaseLLMProvider
    cache: QueryCache
    history: QueryHistory
    metrics: ExecutionMetrics
    guard: QueryGuard
    executor: ExecutorAgent
    pipeline: SQLAgentPipeline
    project_summary: ProjectSummaryAgent
    rate_limiter: QueryRateLimiter

    @classmethod
    async def create(
        cls,
        settings: Settings,
        connector: BaseConnector | None = None,
        llm: BaseLLMProvider | None = None,
        sql_llm: BaseLLMProvider | None = None,
    ) -> AgentContext:
        """
        Connect to the database, load the schema catalog and wire the agents.

        Connection failure propagates: the service does not start without
        its database.
        """
        if connector is None:
            if settings.database.url is None:
                raise ValueError("DATABASE_URL is not set; the SQL agent needs a target database.")
            connector = create_connector(
                database_url=str(settings.database.url),
                pool_size=settings.database.pool_size,
                timeout=settings.database.pool_timeout,
            )
        await connector.connect()

        catalog = await SchemaCatalog.load(connector)
        logger.info(f"Schema catalog loaded ({len(catalog)} tables)")

        llm = llm or LLMProviderFactory.create_default_provider(settings.llm)
        sql_llm = sql_llm or LLMProviderFactory.create_agent_provider("sql", settings.llm)

        agent_settings = settings.agent
        prompts = PromptLoader()
        cache = QueryCache(
            ttl_seconds=agent_settings.cache_ttl_seconds,
            max_entries=agent_settings.cache_max_entries,
        )
        history = QueryHistory(max_size=agent_settings.history_max_size)
        metrics = ExecutionMetrics()

        guard = QueryGuard(default_limit=agent_settings.default_row_limit)
        executor = ExecutorAgent(
            connector,
            cache,
            history,
            metrics,
            retry_policy=RetryPolicy(
                max_attempts=agent_settings.max_attempts, is_retryable=is_transient_error
            ),
            catalog=catalog,
            cache_max_rows=agent_settings.cache_max_rows,
        )
        pipeline = SQLAgentPipeline(
            category_agent=CategoryAgent(llm, catalog, prompts=prompts),
            table_selector=TableSelector(catalog, max_tables=agent_settings.max_tables),
            sql_agent=SQLAgent(
                sql_llm,
                database_name=settings.database.database_name or "certaintiMaster",
                prompts=prompts,
            ),
            guard=guard,
            executor=executor,
            response_agent=ResponseAgent(
                llm,
                max_rows=agent_settings.response_max_rows,
                max_chars=agent_settings.response_max_chars,
                slow_query_ms=agent_settings.slow_query_ms,
                prompts=prompts,
            ),
            catalog=catalog,
            connector=connector,
            llm=llm,
        )
        project_summary = ProjectSummaryAgent(connector, llm, prompts=prompts)
        rate_limiter = QueryRateLimiter(
            max_requests=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        )

        return cls(
            settings=settings,
            connector=connector,
            catalog=catalog,
            llm=llm,
            sql_llm=sql_llm,
            cache=cache,
            history=history,
            metrics=metrics,
            guard=guard,
            executor=executor,
            pipeline=pipeline,
            project_summary=project_summary,
            rate_limiter=rate_limiter,
        )

    async def close(self) -> None:
        try:
            await self.connector.close()
            logger.info("Database connector closed")
        except Exception as e:
            logger.error(f"Error closing connector: {e}")
