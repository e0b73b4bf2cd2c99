"""Unit tests for the business category definitions."""

from sqlagent.catalog.categories import DEFAULT_CATEGORIES, GENERAL_CATEGORY, KEYWORD_TABLE_MAP


def test_eleven_categories_in_declaration_order():
    names = [category.name for category in DEFAULT_CATEGORIES]

    assert len(names) == 11
    assert names[0] == "Company / Organization"
    assert names[2] == "Projects"
    assert GENERAL_CATEGORY not in names


def test_every_category_has_tables_and_keywords():
    for category in DEFAULT_CATEGORIES:
        assert category.tables
        assert category.keywords
        assert all(keyword == keyword.lower() for keyword in category.keywords)


def test_keyword_table_map_targets_known_tables():
    known = {table for category in DEFAULT_CATEGORIES for table in category.tables}

    for tables in KEYWORD_TABLE_MAP.values():
        assert set(tables) <= known


def test_plural_company_keyword_routes_to_company_table():
    assert KEYWORD_TABLE_MAP["companies"] == ("company",)
