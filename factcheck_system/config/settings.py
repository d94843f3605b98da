"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        destination_name: Destination the verified facts are about (location hint)
        site_url: Public site URL advertised in the bot User-Agent
        bot_name: Bot identifier advertised in the User-Agent
        search_endpoint: Plain-HTML search results endpoint
        search_result_limit: Maximum search results parsed per query
        max_sources_checked: Maximum candidate pages inspected per fact
        snippet_keyword_count: Keywords compared against a search snippet
        snippet_match_threshold: Keyword ratio for a snippet-only match
        page_match_threshold: Keyword ratio for a full-page match
        page_fetch_timeout: Per-page fetch timeout in seconds
        max_page_chars: HTML characters kept from a fetched page
        max_concurrent_fetches: Page checks run at once (1 = sequential)
        search_max_retries / search_base_delay / search_max_delay: search retry policy
        page_max_retries / page_base_delay / page_max_delay: page retry policy
        facts_per_run: Due facts verified per pipeline run
        run_time_budget: Wall-clock seconds before a pipeline run stops verifying
        pause_every: Pause after this many verified facts
        pause_seconds: Length of that pause
        fact_store_path: Optional JSON file for FactStore persistence
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
    """

    destination_name: str = Field(
        default="London",
        description="Destination the verified facts are about"
    )
    site_url: str = Field(
        default="https://yalla-london.com",
        description="Contact URL included in the bot User-Agent"
    )
    bot_name: str = Field(
        default="YallaLondonFactChecker/1.0",
        description="Bot product token included in the User-Agent"
    )
    search_endpoint: str = Field(
        default="https://html.duckduckgo.com/html/",
        description="Plain-HTML search results endpoint"
    )
    search_result_limit: int = Field(default=10, ge=1)
    max_sources_checked: int = Field(default=5, ge=1, le=5)
    snippet_keyword_count: int = Field(default=5, ge=1)
    snippet_match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    page_match_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    page_fetch_timeout: float = Field(default=8.0, gt=0)
    max_page_chars: int = Field(default=500_000, gt=0)
    max_concurrent_fetches: int = Field(
        default=1,
        ge=1,
        description="Concurrent page checks per fact (1 keeps checks sequential)"
    )
    search_max_retries: int = Field(default=2, ge=0)
    search_base_delay: float = Field(default=2.0, ge=0)
    search_max_delay: float = Field(default=10.0, ge=0)
    page_max_retries: int = Field(default=1, ge=0)
    page_base_delay: float = Field(default=1.0, ge=0)
    page_max_delay: float = Field(default=5.0, ge=0)
    facts_per_run: int = Field(
        default=30,
        ge=1,
        description="Cap per run; each fact involves a search and page fetches"
    )
    run_time_budget: float = Field(default=240.0, gt=0)
    pause_every: int = Field(default=5, ge=1)
    pause_seconds: float = Field(default=2.0, ge=0)
    fact_store_path: str | None = Field(
        default=None,
        description="JSON file used to persist the fact store"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def user_agent(self) -> str:
        """Descriptive bot User-Agent with a contact URL."""
        return f"Mozilla/5.0 (compatible; {self.bot_name}; +{self.site_url})"


# Singleton instance - import this throughout the application
settings = Settings()
