"""Command-line interface for the destination fact checker using Typer and Rich."""

import asyncio
import json
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from factcheck_system.config.logging import get_logger
from factcheck_system.config.settings import settings
from factcheck_system.data_management.schemas import (
    Article,
    Fact,
    FactCategory,
    VerificationOutcome,
)

app = typer.Typer(
    help="Destination fact checker - cross-checks travel facts against trusted web sources",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")

RESULT_STYLES = {
    VerificationOutcome.VERIFIED: "green",
    VerificationOutcome.OUTDATED: "yellow",
    VerificationOutcome.FLAGGED_FOR_REVIEW: "magenta",
    VerificationOutcome.UNVERIFIABLE: "red",
}


@app.command()
def status() -> None:
    """
    Display configuration used for verification runs.
    """
    logger.info("Displaying system status")

    table = Table(title="Fact Checker Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=15)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)
    table.add_row("Destination", "✓ Set", settings.destination_name)
    table.add_row("Search", "✓ Configured", f"{settings.search_endpoint} (limit {settings.search_result_limit})")
    table.add_row(
        "Matching",
        "✓ Active",
        f"snippet {settings.snippet_match_threshold:.0%}, page {settings.page_match_threshold:.0%}, "
        f"{settings.max_sources_checked} sources",
    )
    store_status = "✓ Persistent" if settings.fact_store_path else "⚠ Memory only"
    table.add_row("Fact Store", store_status, settings.fact_store_path or "-")
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def verify(
    text: str = typer.Argument(..., help="Fact text to verify"),
    category: Optional[FactCategory] = typer.Option(None, help="Fact category"),
    age_days: int = typer.Option(0, min=0, help="Age of the fact in days"),
    timeout: Optional[float] = typer.Option(None, help="Overall deadline for page checks in seconds"),
) -> None:
    """
    Verify a single fact against the web and print the verdict.
    """
    from factcheck_system.agents.sifters.verification.web_verifier import verify_fact

    now = datetime.now(timezone.utc)
    fact = Fact(
        id=f"cli-{uuid.uuid4().hex[:8]}",
        category=category,
        created_at=now - timedelta(days=age_days),
        fact_text=text,
    )
    logger.info("Verifying fact from CLI", fact_id=fact.id)

    result = asyncio.run(verify_fact(fact, now=now, timeout=timeout))

    style = RESULT_STYLES[result.result]
    console.print(Panel(
        f"[bold {style}]{result.result.value}[/bold {style}]  confidence {result.confidence}\n\n"
        f"{result.notes}",
        title=text[:80],
        border_style=style,
    ))

    if result.sources_checked:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Domain", style="cyan")
        table.add_column("Tier", justify="center")
        table.add_column("Match", justify="center")
        table.add_column("Evidence", style="dim", overflow="fold")
        for check in result.sources_checked:
            table.add_row(
                check.domain,
                str(check.tier),
                "[green]✓[/green]" if check.matched else "[red]✗[/red]",
                check.snippet[:160],
            )
        console.print(table)


@app.command()
def run(
    articles_json: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of articles"),
    store: Optional[Path] = typer.Option(None, help="Fact store JSON file (defaults to settings)"),
) -> None:
    """
    Run a full extraction and verification pass over a set of articles.
    """
    from factcheck_system.pipeline.verification_pipeline import VerificationPipeline

    try:
        raw = json.loads(articles_json.read_text(encoding="utf-8"))
        articles = [Article.model_validate(item) for item in raw]
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"\n[red]✗[/red] Invalid articles file: {e}")
        logger.error(f"Invalid articles file: {e}")
        raise typer.Exit(1)

    config = settings
    if store is not None:
        config = settings.model_copy(update={"fact_store_path": str(store)})

    async def _run() -> dict:
        async with VerificationPipeline.from_settings(config) as pipeline:
            return await pipeline.run(articles)

    metrics = asyncio.run(_run())

    table = Table(title="Verification Run", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key in (
        "articles_scanned",
        "facts_extracted",
        "new_facts_registered",
        "facts_verified",
        "facts_flagged_outdated",
    ):
        table.add_row(key.replace("_", " "), str(metrics[key]))
    table.add_row("errors", str(len(metrics["errors"])))
    table.add_row("duration", f"{metrics['duration_ms'] / 1000:.1f}s")
    console.print(table)

    if metrics["stopped_early"]:
        console.print("[yellow]⚠ Time budget reached; remaining facts will be checked next run[/yellow]")
    for error in metrics["errors"]:
        console.print(f"[red]✗[/red] {error}")


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Destination Fact Checker[/bold]")
    console.print("Version: 0.1.0")


if __name__ == "__main__":
    app()
