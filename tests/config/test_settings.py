"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from factcheck_system.config.settings import Settings


class TestSettings:

    def test_defaults(self):
        config = Settings(_env_file=None)

        assert config.destination_name == "London"
        assert config.max_sources_checked == 5
        assert config.snippet_match_threshold == 0.5
        assert config.page_match_threshold == 0.4
        assert config.page_fetch_timeout == 8.0
        assert config.facts_per_run == 30

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DESTINATION_NAME", "Edinburgh")
        monkeypatch.setenv("MAX_CONCURRENT_FETCHES", "3")

        config = Settings(_env_file=None)

        assert config.destination_name == "Edinburgh"
        assert config.max_concurrent_fetches == 3

    def test_user_agent_identifies_bot(self):
        config = Settings(_env_file=None, bot_name="TestBot/2.0", site_url="https://example.com")

        assert config.user_agent == "Mozilla/5.0 (compatible; TestBot/2.0; +https://example.com)"

    def test_source_cap(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_sources_checked=6)
