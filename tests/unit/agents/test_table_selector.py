"""Unit tests for TableSelector."""

import pytest

from sqlagent.agents.table_selector import KeywordTableScorer, TableScorer, TableSelector
from sqlagent.catalog.categories import DEFAULT_CATEGORIES


@pytest.fixture
def selector(sample_catalog):
    return TableSelector(sample_catalog)


def test_keyword_hit_selects_company(selector):
    company_tables = list(DEFAULT_CATEGORIES[0].tables)

    assert selector.select("How many companies do we have?", company_tables) == ["company"]


def test_projects_added_for_counting_questions(selector):
    tables = selector.select("How many rows in company", ["company", "projects"])

    assert tables == ["company", "projects"]


def test_scoring_used_without_keyword_hits(selector):
    tables = selector.select("Show firstName values", ["company", "projects", "contacts"])

    # contacts: column name (8) + name column (5)
    assert tables[0] == "contacts"


def test_first_candidate_when_nothing_scores(selector):
    assert selector.select("xyz", ["contacts", "company"]) == ["contacts"]


def test_no_candidates_gives_empty_selection(selector):
    assert selector.select("xyz", []) == []


def test_selection_capped_at_max_tables(selector):
    tables = selector.select(
        "company project contact users",
        ["company", "projects", "contacts", "platformusers"],
    )

    assert tables == ["company", "projects", "contacts"]


def test_custom_scorer(sample_catalog):
    class ContactsOnly:
        def score(self, question_lower, table_name, schema):
            return 1 if table_name == "contacts" else 0

    scorer = ContactsOnly()
    assert isinstance(scorer, TableScorer)

    selector = TableSelector(sample_catalog, scorer=scorer)

    assert selector.select("anything goes", ["company", "contacts"]) == ["contacts"]


def test_keyword_scorer_weights(sample_catalog):
    scorer = KeywordTableScorer()
    schema = sample_catalog.get("company")

    # table name (20), name part (10), companyName column (8) and its "name" bonus (5)
    assert scorer.score("list company companyname", "company", schema) == 20 + 10 + 8 + 5
