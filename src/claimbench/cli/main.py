"""
CLI Main - Typer command-line interface.
========================================

Commands:
- eval: Evaluate a RAG pipeline against a ground-truth dataset
- info: Show effective configuration
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from claimbench.shared.logging import get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="claimbench",
    help="""Claim-based evaluation for RAG pipelines.

Asks your pipeline every ground-truth question, extracts atomic claims from
the answers and retrieved context with an LLM judge, and reports claim-level
precision/recall, retrieval quality and generator faithfulness.

  claimbench eval -g data/ground_truth.json -p my_rag.pipeline:Pipeline
  claimbench info
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


# ─────────────────────────────────────────────────────────────────────────────
# Eval Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def eval(
    pipeline: str = typer.Option(
        ...,
        "--pipeline", "-p",
        help="Pipeline under test as 'module:attribute' (instance, class or factory).",
    ),
    ground_truth: Optional[Path] = typer.Option(
        None,
        "--ground-truth", "-g",
        help="Ground truth file (JSON/JSONL/YAML). Default: evaluation.ground_truth_path.",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save the full evaluation report to a JSON file.",
    ),
    backend: Optional[str] = typer.Option(
        None,
        "--backend", "-b",
        help="Judge backend: gemini (hosted) or ollama (local). Default from config.",
    ),
    isolate_failures: bool = typer.Option(
        False,
        "--isolate-failures",
        help="Skip questions whose evaluation fails instead of aborting the run.",
    ),
):
    """
    📊 Evaluate a RAG pipeline against a ground-truth dataset.

    Examples:
        claimbench eval -p my_rag.pipeline:Pipeline
        claimbench eval -p my_rag.pipeline:Pipeline -g qa.jsonl -o report.json
        claimbench eval -p my_rag.pipeline:Pipeline -b ollama --isolate-failures
    """
    from claimbench.evaluation import Evaluator, load_pipeline
    from claimbench.judge import create_judge
    from claimbench.shared.config import get_settings
    from claimbench.shared.exceptions import ClaimBenchError

    settings = get_settings()
    if backend:
        settings = settings.model_copy(update={"judge_backend": backend})

    ground_truth = ground_truth or settings.resolve_path(settings.evaluation.ground_truth_path)

    console.print(Panel(
        f"[bold]Evaluation Configuration[/bold]\n"
        f"Pipeline: {pipeline}\n"
        f"Ground truth: {ground_truth}\n"
        f"Judge: {settings.get_effective_backend()} / {settings.get_effective_model()}\n"
        f"On failure: {'skip question' if isolate_failures else 'abort run'}",
        title="📊 Evaluate",
    ))

    try:
        evaluator = Evaluator(
            judge=create_judge(settings),
            isolate_failures=isolate_failures or settings.evaluation.isolate_failures,
            settings=settings,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Evaluating...", total=None)

            def callback(current, question):
                progress.update(task, description=f"Question {current}: {question[:60]}")

            report = evaluator.evaluate_sync(
                load_pipeline(pipeline), ground_truth, progress_callback=callback
            )
    except (ClaimBenchError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗ Evaluation failed: {e}[/red]")
        raise typer.Exit(code=1)

    _print_report(report)

    if output_file:
        report.save(output_file)
        console.print(f"\n[green]✓ Report saved to {output_file}[/green]")


def _print_report(report) -> None:
    """Render averaged metrics as a Rich table."""
    table = Table(title=f"Averages over {report.num_questions} questions")
    table.add_column("Family")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    for family, averaged in report.averages().items():
        for name, value in averaged.model_dump().items():
            table.add_row(family, name, f"{value:.3f}")

    console.print(table)

    for failure in report.failed_questions:
        console.print(f"[yellow]Skipped: {failure.question} ({failure.error})[/yellow]")


# ─────────────────────────────────────────────────────────────────────────────
# Info Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def info():
    """
    ℹ️ Show version and effective configuration.
    """
    from claimbench import __version__
    from claimbench.shared.config import get_settings

    settings = get_settings()

    console.print(Panel(
        f"[bold]claimbench[/bold]\n"
        f"Version: {__version__}\n"
        f"Config: config/settings.yaml",
        title="ℹ️ Info",
    ))

    table = Table()
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("judge backend", settings.get_effective_backend())
    table.add_row("judge model", settings.get_effective_model())
    table.add_row("max concurrent calls", str(settings.judge.max_concurrent_calls))
    table.add_row("retries", str(settings.retry.max_retries))
    table.add_row("retry delay (s)", str(settings.retry.delay_seconds))
    table.add_row("call timeout (s)", str(settings.retry.timeout_seconds))
    table.add_row("retry statuses", ", ".join(map(str, settings.retry.retry_status_codes)))
    table.add_row("ground truth", settings.evaluation.ground_truth_path)
    table.add_row("isolate failures", str(settings.evaluation.isolate_failures))

    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    from claimbench.shared.logging import setup_logging_from_settings

    setup_logging_from_settings()
    app()


if __name__ == "__main__":
    cli()
