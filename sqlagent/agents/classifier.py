"""
CategoryAgent

Maps a question onto one business category by weighted keyword matching,
asking the LLM only when no keyword matches at all.
"""

import logging
from collections.abc import Sequence

from sqlagent.agents.base import BaseAgent
from sqlagent.catalog.categories import DEFAULT_CATEGORIES, GENERAL_CATEGORY
from sqlagent.catalog.schema import SchemaCatalog
from sqlagent.llm.base import BaseLLMProvider
from sqlagent.models.agent import CategorySelection
from sqlagent.models.catalog import CategoryDefinition
from sqlagent.prompts.loader import PromptLoader

logger = logging.getLogger(__name__)


class CategoryAgent(BaseAgent):
    """
    Category selection.

    Each category scores the sum of the lengths of its keywords found in the
    lowercased question; the highest non-zero score wins and ties keep the
    category declared first. Questions with no keyword hit go to the LLM,
    and anything it cannot place falls back to the General category, which
    spans every table in the catalog.
    """

    def __init__(
        self,
        llm_provider: BaseLLMProvider,
        catalog: SchemaCatalog,
        categories: Sequence[CategoryDefinition] = DEFAULT_CATEGORIES,
        prompts: PromptLoader | None = None,
    ):
        super().__init__(name="CategoryAgent", llm_provider=llm_provider)
        self.catalog = catalog
        self.categories = tuple(categories)
        self.prompts = prompts or PromptLoader()

    def score(self, question: str) -> dict[str, int]:
        """Keyword score per category, in declaration order."""
        question_lower = question.lower()
        return {
            category.name: sum(
                len(keyword) for keyword in category.keywords if keyword in question_lower
            )
            for category in self.categories
        }

    async def select_category(self, question: str) -> CategorySelection:
        best: CategoryDefinition | None = None
        best_score = 0
        scores = self.score(question)
        for category in self.categories:
            if scores[category.name] > best_score:
                best, best_score = category, scores[category.name]

        if best is not None:
            logger.info(
                f"Category: {best.name}",
                extra={"category": best.name, "score": best_score},
            )
            return CategorySelection(category=best.name, tables=list(best.tables), score=best_score)

        by_name = {category.name: category for category in self.categories}
        prompt = self.prompts.render(
            "agents/category_classifier.md",
            categories=list(by_name),
            question=question,
        )
        try:
            reply = await self._complete(prompt)
        except Exception as exc:
            logger.error(f"Error in LLM category selection: {exc}")
            reply = ""

        category = by_name.get(reply)
        if category is not None:
            logger.info(f"Category (LLM): {category.name}", extra={"category": category.name})
            return CategorySelection(
                category=category.name, tables=list(category.tables), used_llm=True
            )

        logger.info(f"Category: {GENERAL_CATEGORY}", extra={"llm_reply": reply[:100]})
        return CategorySelection(
            category=GENERAL_CATEGORY,
            tables=self.catalog.table_names(),
            used_llm=True,
        )
