"""Command-line interface for the trust pipeline using Typer and Rich."""

import asyncio
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trust_system import __version__
from trust_system.config.logging import get_logger
from trust_system.config.settings import settings
from trust_system.data_management.audit_log import AuditLog
from trust_system.data_management.document_store import (
    AUDIT_LOGS,
    EVENTS,
    PENDING_EVENTS,
    SYSTEM_LOGS,
    DocumentStore,
)
from trust_system.data_management.event_store import EventStore
from trust_system.pipeline.verification_pipeline import VerificationPipeline
from trust_system.scoring.aggregator import ScoreAggregator
from trust_system.scoring.formulas import credibility_score
from trust_system.scoring.votes import EventNotFoundError, VoteService

app = typer.Typer(
    help="Trust System CLI - claim collection, moderation and trust scoring",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


def _open_store() -> DocumentStore:
    return DocumentStore(settings.store_path)


def _configured(endpoint: Optional[str], api_key: Optional[str]) -> str:
    return "✓ Configured" if endpoint and api_key else "⚠ Not Configured"


@app.command()
def status() -> None:
    """
    Display configuration and store contents.
    """
    logger.info("Displaying system status")

    store = _open_store()
    stats = asyncio.run(store.get_storage_stats())

    table = Table(title="Trust System Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=18)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)
    table.add_row(
        "Extraction Service",
        _configured(settings.extraction_endpoint, settings.extraction_api_key),
        f"Fallback policy: {settings.fallback_policy.value}",
    )
    table.add_row(
        "Moderation Service",
        _configured(settings.moderation_endpoint, settings.moderation_api_key),
        f"Fallback policy: {settings.fallback_policy.value}",
    )
    table.add_row(
        "Fact-Check Service",
        _configured(settings.fact_check_endpoint, settings.fact_check_api_key),
        "Unchecked events keep verified=None",
    )
    table.add_row(
        "Document Store",
        "✓ Persistent" if stats["persistence_enabled"] else "⚠ Memory only",
        stats["persistence_path"] or "set TRUST_STORE_PATH to persist",
    )

    collections = stats["collections"]
    for name in (PENDING_EVENTS, EVENTS, AUDIT_LOGS, SYSTEM_LOGS):
        table.add_row(f"  {name}", str(collections.get(name, 0)), "documents")

    table.add_row(
        "Retention",
        "✓ Active",
        f"Delete below {settings.retention_threshold} after {settings.retention_days:g} days",
    )
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def collect(
    source: Optional[List[str]] = typer.Option(
        None, "--source", "-s", help="Source key to collect (repeatable, default: all)"
    ),
    force: bool = typer.Option(False, help="Ignore the minimum run interval"),
) -> None:
    """
    Run one collection pass: collect, extract, cross-check, moderate.
    """
    pipeline = VerificationPipeline(_open_store())
    summary = asyncio.run(pipeline.run(sources=source or None, force=force))

    if summary.get("skipped"):
        console.print(f"[yellow]⚠ Skipped:[/yellow] {summary['skipped']}")
        raise typer.Exit(0)

    table = Table(title="Collection Run", show_header=True, header_style="bold magenta")
    table.add_column("Stage", style="cyan")
    table.add_column("Counters", style="green")
    for stage in ("collection", "extraction", "cross_check", "moderation"):
        counters = ", ".join(f"{k}={v}" for k, v in summary[stage].items())
        table.add_row(stage, counters)
    table.add_row("duplicates", str(summary["duplicates"]))
    console.print(table)


@app.command(name="fact-check")
def fact_check(
    force: bool = typer.Option(False, help="Ignore the minimum run interval"),
) -> None:
    """
    Fact-check published events that have no verdict yet.
    """
    pipeline = VerificationPipeline(_open_store())
    result = asyncio.run(pipeline.run_fact_check(force=force))

    if result.get("skipped"):
        console.print(f"[yellow]⚠ Skipped:[/yellow] {result['skipped']}")
        raise typer.Exit(0)

    results = result["results"]
    console.print(
        Panel(
            f"Scanned: {results['scanned']} | Passed: {results['passed']} | "
            f"Failed: {results['failed']} | Skipped: {results['skipped']} | "
            f"Errors: {results['errors']}",
            title="Fact-Check Complete",
            border_style="green",
        )
    )


@app.command()
def cleanup(
    force: bool = typer.Option(False, help="Ignore the minimum run interval"),
) -> None:
    """
    Run one retention scan over published events.
    """
    pipeline = VerificationPipeline(_open_store())
    result = asyncio.run(pipeline.run_retention(force=force))

    if result.get("skipped"):
        console.print(f"[yellow]⚠ Skipped:[/yellow] {result['skipped']}")
        raise typer.Exit(0)

    results = result["results"]
    console.print(
        Panel(
            f"Scanned: {results['scanned']} | Flagged: {results['flagged']} | "
            f"Deleted: {results['deleted']} | Errors: {results['errors']}",
            title="Cleanup Complete",
            border_style="green",
        )
    )


@app.command()
def vote(
    event_id: str = typer.Argument(..., help="Event id"),
    user_id: str = typer.Option(..., "--user", "-u", help="Voting user id"),
    value: int = typer.Option(1, "--value", "-v", help="-1, 0 or 1"),
    role: str = typer.Option("user", help="Voter role (admin and journalist count double)"),
    remove: bool = typer.Option(False, "--remove", help="Remove the user's vote instead"),
) -> None:
    """
    Cast, change or remove a vote and show the recomputed scores.
    """
    events = EventStore(_open_store())
    service = VoteService(events)

    try:
        if remove:
            update = asyncio.run(service.remove_vote(event_id, user_id))
        else:
            update = asyncio.run(service.cast_vote(event_id, user_id, value, role=role))
    except (ValueError, EventNotFoundError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    if update is None:
        console.print(f"[red]✗[/red] Event not found: {event_id}")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] community={update.community_score:.3f} "
        f"final={update.final_score:.3f} "
        f"(credibility {credibility_score(update.final_score)})"
    )


@app.command()
def rescore() -> None:
    """Recompute community and final scores for every event."""
    aggregator = ScoreAggregator(EventStore(_open_store()))
    stats = asyncio.run(aggregator.recompute_all())
    console.print(
        f"[green]✓[/green] Rescored {stats.events_updated}/{stats.events_scanned} events "
        f"({stats.errors} errors)"
    )


@app.command()
def audit(
    deletions: bool = typer.Option(False, "--deletions", help="Show retention deletions"),
    limit: int = typer.Option(20, help="Maximum rows"),
) -> None:
    """
    Show the most recent moderation decisions or retention deletions.
    """
    store = _open_store()
    log = AuditLog(store, SYSTEM_LOGS if deletions else AUDIT_LOGS)
    entries = asyncio.run(log.list_entries())[-limit:]

    table = Table(
        title="Retention Deletions" if deletions else "Moderation Decisions",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Time", style="dim")
    table.add_column("Subject", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Actor")
    table.add_column("Reason", style="yellow")
    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.subject_id[:16],
            entry.status or "",
            entry.actor,
            entry.reason or "",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]Trust System[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
