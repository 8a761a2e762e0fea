"""Command-line interface using Typer."""

from typing import NoReturn
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ad_engine import __version__
from ad_engine.domain.errors import AppError
from ad_engine.logging import setup_logging
from ad_engine.services.generations import GenerationDispatcher

# Setup logging
setup_logging()

app = typer.Typer(
    name="ad-engine",
    help="AI Ad Engine - testimonial video ads from marketing briefs",
    add_completion=False,
)

# Subcommand groups
brief_app = typer.Typer(help="Brief management commands")
app.add_typer(brief_app, name="brief")

console = Console()

STATUS_STYLES = {
    "COMPLETED": "green",
    "FAILED": "red",
    "PROCESSING": "yellow",
    "PENDING": "dim",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"AI Ad Engine v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """AI Ad Engine - generate, track and iterate on video ad batches."""
    if verbose:
        setup_logging(level="DEBUG")


def _parse_id(value: str, entity: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        console.print(f"[bold red]Invalid {entity} ID: {value}[/bold red]")
        raise typer.Exit(code=1) from None


def _fail(error: AppError) -> NoReturn:
    console.print(f"[bold red]Error: {error.message}[/bold red]")
    fields = getattr(error, "fields", None)
    if fields:
        for name, problem in fields.items():
            console.print(f"  [yellow]{name}[/yellow]: {problem}")
    raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"AI Ad Engine v{__version__}")


# =============================================================================
# BRIEF COMMANDS
# =============================================================================


@brief_app.command("create")
def brief_create(
    text: str = typer.Argument(..., help="Raw brief text"),
    parse: bool = typer.Option(True, "--parse/--no-parse", help="Parse right away"),
) -> None:
    """Store a new brief."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.briefs import BriefService

    try:
        with get_session_context() as session:
            service = BriefService(session)
            brief = service.create(text)
            if parse:
                brief = service.parse(brief.id)
            brief_id, status = str(brief.id), brief.status
    except AppError as e:
        _fail(e)

    console.print(f"[green]Brief created: {brief_id}[/green] ({status})")


@brief_app.command("parse")
def brief_parse(
    brief_id: str = typer.Argument(..., help="Brief ID (UUID)"),
) -> None:
    """Parse a stored brief."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.briefs import BriefService

    brief_uuid = _parse_id(brief_id, "brief")

    try:
        with get_session_context() as session:
            brief = BriefService(session).parse(brief_uuid)
            parsed = brief.parsed_data or {}
    except AppError as e:
        _fail(e)

    console.print(f"[green]Brief parsed:[/green] {parsed.get('hook', '')}")


@brief_app.command("show")
def brief_show(
    brief_id: str = typer.Argument(..., help="Brief ID (UUID)"),
) -> None:
    """Show a brief and its parsed data."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.briefs import BriefService

    brief_uuid = _parse_id(brief_id, "brief")

    try:
        with get_session_context() as session:
            brief = BriefService(session).get(brief_uuid)
            parsed = brief.parsed_data or {}
            persona = parsed.get("persona", {})

            console.print(Panel.fit(
                f"[bold]{brief.raw_input[:200]}[/bold]\n\n"
                f"[cyan]Status:[/cyan] {brief.status}\n"
                f"[cyan]Hook:[/cyan] {parsed.get('hook', '-')}\n"
                f"[cyan]Persona:[/cyan] {persona.get('type', '-')} ({persona.get('tone', '-')})\n"
                f"[cyan]Emotion:[/cyan] {parsed.get('emotion', '-')}\n"
                f"[cyan]B-roll:[/cyan] {', '.join(parsed.get('broll_tags', [])) or '-'}\n"
                f"[cyan]Generations:[/cyan] {len(brief.generations)}",
                title=f"Brief {brief.id}",
                border_style="blue",
            ))
    except AppError as e:
        _fail(e)


# =============================================================================
# GENERATION COMMANDS
# =============================================================================


@app.command()
def generate(
    brief_id: str = typer.Argument(..., help="Parsed brief ID (UUID)"),
    count: int = typer.Option(3, "--count", "-n", help="Number of videos (1-10)"),
    inline: bool = typer.Option(
        False, "--inline", help="Run the pipeline in this process instead of the worker"
    ),
) -> None:
    """Start a generation batch for a parsed brief."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.generations import GenerationService

    brief_uuid = _parse_id(brief_id, "brief")

    try:
        with get_session_context() as session:
            dispatcher = _InlineDispatcher() if inline else _celery_dispatcher()
            generation = GenerationService(session, dispatcher).create(brief_uuid, count)
            generation_id, task_id = generation.id, generation.task_id
    except AppError as e:
        _fail(e)

    console.print(f"[green]Generation created: {generation_id}[/green]")

    if inline:
        _run_inline(generation_id)
    else:
        console.print(f"[dim]Task ID: {task_id}[/dim]")


@app.command()
def iterate(
    video_id: str = typer.Argument(..., help="Approved video ID (UUID)"),
    count: int = typer.Option(3, "--count", "-n", help="Number of videos (1-10)"),
    inline: bool = typer.Option(
        False, "--inline", help="Run the pipeline in this process instead of the worker"
    ),
) -> None:
    """Start a new generation from a video that passed quality review."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.iteration import IterationService

    video_uuid = _parse_id(video_id, "video")

    try:
        with get_session_context() as session:
            dispatcher = _InlineDispatcher() if inline else _celery_dispatcher()
            generation = IterationService(session, dispatcher).iterate(video_uuid, count)
            generation_id = generation.id
            parent_id = generation.parent_generation_id
    except AppError as e:
        _fail(e)

    console.print(f"[green]Iteration created: {generation_id}[/green] (parent {parent_id})")

    if inline:
        _run_inline(generation_id)


@app.command()
def status(
    generation_id: str = typer.Argument(..., help="Generation ID (UUID)"),
) -> None:
    """Show a generation's status, videos and cost."""
    from ad_engine.db.session import get_session_context
    from ad_engine.services.generations import GenerationService

    generation_uuid = _parse_id(generation_id, "generation")

    try:
        with get_session_context() as session:
            summary = GenerationService(session).summary(generation_uuid)
            generation = summary["generation"]
            progress = summary["progress"]

            console.print(Panel.fit(
                f"[cyan]Status:[/cyan] {generation.status}\n"
                f"[cyan]Brief:[/cyan] {generation.brief_id}\n"
                f"[cyan]Parent:[/cyan] {generation.parent_generation_id or '-'}\n"
                f"[cyan]Progress:[/cyan] {progress['completed']} completed, "
                f"{progress['failed']} failed, {progress['pending']} pending "
                f"of {progress['total']}\n"
                f"[cyan]Total cost:[/cyan] ${generation.total_cost}\n"
                f"[cyan]Error:[/cyan] {generation.error_message or '-'}",
                title=f"Generation {generation.id}",
                border_style="blue",
            ))

            if generation.videos:
                table = Table(title="Videos")
                table.add_column("#", style="dim")
                table.add_column("ID", style="dim", no_wrap=True)
                table.add_column("Status")
                table.add_column("Quality")
                table.add_column("Cost", justify="right")
                table.add_column("URL / Error")

                for video in generation.videos:
                    style = STATUS_STYLES.get(video.status, "white")
                    params = video.generation_params or {}
                    table.add_row(
                        str(video.variant_index + 1),
                        str(video.id)[:8] + "...",
                        f"[{style}]{video.status}[/{style}]",
                        video.quality_status,
                        f"${video.total_cost}",
                        video.video_url or params.get("error", "-"),
                    )

                console.print(table)
    except AppError as e:
        _fail(e)


@app.command()
def costs(
    video_id: str = typer.Argument(..., help="Video ID (UUID)"),
) -> None:
    """Show the cost breakdown of a video."""
    from ad_engine.db.models import VideoModel
    from ad_engine.db.session import get_session_context
    from ad_engine.services.cost_ledger import CostLedger

    video_uuid = _parse_id(video_id, "video")

    with get_session_context() as session:
        video = session.get(VideoModel, video_uuid)
        if video is None:
            console.print(f"[bold red]Video not found: {video_id}[/bold red]")
            raise typer.Exit(code=1)

        rows, subtotals = CostLedger(session).video_breakdown(video.id)

        table = Table(title=f"Costs for video {video.id}")
        table.add_column("Service", style="cyan")
        table.add_column("Provider")
        table.add_column("Operation")
        table.add_column("Units", justify="right")
        table.add_column("Cost", justify="right", style="green")

        for row in rows:
            table.add_row(
                row.service_type,
                row.provider,
                row.operation,
                f"{row.output_units:g} {row.unit_type}",
                f"${row.cost}",
            )

        console.print(table)
        for service, subtotal in subtotals.items():
            console.print(f"[dim]{service}:[/dim] ${subtotal}")
        console.print(f"[bold]Total:[/bold] ${video.total_cost}")


@app.command()
def worker() -> None:
    """Start a Celery worker (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    subprocess.run(
        [
            sys.executable,
            "-m",
            "celery",
            "-A",
            "ad_engine.worker",
            "worker",
            "--loglevel=info",
            "-Q",
            "pipeline,celery",
        ],
        check=True,
    )


# =============================================================================
# HELPERS
# =============================================================================


class _InlineDispatcher(GenerationDispatcher):
    """Leaves the generation for ``_run_inline`` to pick up."""

    def dispatch(self, generation_id: UUID) -> str | None:
        return None


def _celery_dispatcher() -> GenerationDispatcher:
    from ad_engine.jobs.generation import CeleryGenerationDispatcher

    return CeleryGenerationDispatcher()


def _run_inline(generation_id: UUID) -> None:
    from ad_engine.services.pipeline import GenerationPipeline
    from ad_engine.utils import run_async

    console.print("[bold blue]Running pipeline...[/bold blue]")

    try:
        result = run_async(GenerationPipeline().run(generation_id))
    except AppError as e:
        _fail(e)

    style = STATUS_STYLES.get(result.status, "white")
    console.print(
        f"[{style}]{result.status}[/{style}]: {result.completed} completed, "
        f"{result.failed} failed, total ${result.total_cost}"
    )


if __name__ == "__main__":
    app()
