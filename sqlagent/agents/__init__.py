"""
Agents Module

Stages of the question pipeline plus the project summary agent.

Available Agents:
    - CategoryAgent: keyword/LLM category selection
    - TableSelector: narrows candidate tables (pluggable TableScorer)
    - SQLAgent: SQL generation with rate-limit fallback
    - QueryGuard: blocklist and row-limit rewrite
    - ExecutorAgent: cached, retried execution
    - ResponseAgent: natural language answers
    - ProjectSummaryAgent: stored project summaries and project Q&A
"""

from sqlagent.agents.base import BaseAgent
from sqlagent.agents.classifier import CategoryAgent
from sqlagent.agents.executor import ExecutorAgent
from sqlagent.agents.project_summary import ProjectSummaryAgent
from sqlagent.agents.response_synthesis import ResponseAgent
from sqlagent.agents.sql import SQLAgent
from sqlagent.agents.table_selector import KeywordTableScorer, TableScorer, TableSelector
from sqlagent.agents.validator import QueryGuard

__all__ = [
    "BaseAgent",
    "CategoryAgent",
    "ExecutorAgent",
    "KeywordTableScorer",
    "ProjectSummaryAgent",
    "QueryGuard",
    "ResponseAgent",
    "SQLAgent",
    "TableScorer",
    "TableSelector",
]
