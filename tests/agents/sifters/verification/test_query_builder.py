"""Tests for QueryBuilder."""

from factcheck_system.agents.sifters.verification.query_builder import QueryBuilder
from factcheck_system.data_management.schemas import FactCategory


class TestQueryBuilder:

    def test_appends_destination(self):
        builder = QueryBuilder(destination="London")

        query = builder.build("Oyster card daily cap is £8.10 in Zones 1-2", FactCategory.PRICE)

        assert query == "Oyster card daily cap £8.10 Zones 1-2 London"

    def test_destination_never_duplicated(self):
        builder = QueryBuilder(destination="London")

        query = builder.build("The London Eye opens at 10:00 daily", FactCategory.SCHEDULE)

        assert query.lower().count("london") == 1
        assert query.endswith("London")

    def test_site_hints_for_transport(self):
        builder = QueryBuilder(destination="London")

        query = builder.build("Take the Elizabeth line to Paddington", FactCategory.TRANSPORT)

        assert query.endswith("London site:tfl.gov.uk OR site:timeout.com")

    def test_no_site_hints_without_category(self):
        query = QueryBuilder().build("Borough Market sells cheese daily", None)

        assert "site:" not in query

    def test_caps_keywords(self):
        builder = QueryBuilder(destination="", max_keywords=8)
        text = "alpha bravo charlie delta echo foxtrot golf hotel india juliet"

        query = builder.build(text, None)

        assert query.split() == ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel"]

    def test_keywords_exclude_destination(self):
        builder = QueryBuilder(destination="London")

        assert builder.keywords("London is a city") == ["city"]
