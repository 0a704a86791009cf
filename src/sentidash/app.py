from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from sentidash.config import Settings, get_settings
from sentidash.core.errors import ConfigurationError
from sentidash.core.logger import get_logger, setup_logging
from sentidash.core.types import LABELS, AnalysisResult
from sentidash.evaluation import (
    EvaluationReport,
    GroundTruth,
    default_ground_truth,
    evaluate as evaluate_results,
    load_ground_truth,
)
from sentidash.export import EXPORT_FORMATS
from sentidash.ingest import read_upload
from sentidash.insights import DashboardSummary
from sentidash.sentiment.base import SentimentClient
from sentidash.sentiment.gemini import GeminiSentimentClient
from sentidash.session import AnalysisSession

log = get_logger("sentidash")
console = Console()
cli_app = typer.Typer(help="Batch sentiment analysis with Gemini: evaluate, summarize, export.")


def _load_settings() -> Settings:
    try:
        settings = get_settings()
        settings.validate_gemini_credentials()
    except (ConfigurationError, ValueError) as e:
        log.error(f"Configuration error: {e}")
        raise typer.Exit(code=1)
    return settings


def _make_client(settings: Settings) -> SentimentClient:
    return GeminiSentimentClient(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        model=settings.gemini_model,
        timeout=settings.request_timeout_sec,
    )


def _ground_truth(settings: Settings) -> GroundTruth:
    if not settings.ground_truth_path:
        return default_ground_truth()
    try:
        return load_ground_truth(settings.ground_truth_path)
    except (OSError, ValueError) as e:
        log.error(f"Cannot load ground truth from {settings.ground_truth_path}: {e}")
        raise typer.Exit(code=1)


def _render_results(results: Sequence[AnalysisResult]) -> None:
    table = Table(title="Detailed Analysis")
    table.add_column("#", justify="right")
    table.add_column("Sentiment")
    table.add_column("Confidence", justify="right")
    table.add_column("Text")
    table.add_column("Keywords")
    table.add_column("Explanation")
    for i, r in enumerate(results, start=1):
        table.add_row(
            str(i),
            r.sentiment.value,
            f"{float(r.confidence) * 100:.1f}%",
            r.original_text,
            ", ".join(r.keywords),
            r.explanation,
        )
    console.print(table)


def _render_evaluation(report: EvaluationReport) -> None:
    matrix = Table(title=f"Confusion Matrix ({report.evaluated} evaluated)")
    matrix.add_column("Actual \\ Predicted")
    for label in LABELS:
        matrix.add_column(label.value, justify="right")
    for actual in LABELS:
        matrix.add_row(actual.value, *(str(report.matrix[actual][p]) for p in LABELS))
    console.print(matrix)

    metrics = Table(title=f"Overall Accuracy: {report.accuracy * 100:.2f}%")
    metrics.add_column("Label")
    metrics.add_column("Precision", justify="right")
    metrics.add_column("Recall", justify="right")
    metrics.add_column("F1-Score", justify="right")
    for label in LABELS:
        m = report.metrics[label]
        metrics.add_row(label.value, f"{m.precision:.3f}", f"{m.recall:.3f}", f"{m.f1:.3f}")
    console.print(metrics)


def _render_summary(summary: DashboardSummary) -> None:
    dist = Table(title="Sentiment Distribution")
    dist.add_column("Sentiment")
    dist.add_column("Count", justify="right")
    dist.add_column("Share", justify="right")
    for label, count, share in summary.distribution:
        dist.add_row(label.value, str(count), f"{share * 100:.1f}%")
    console.print(dist)

    kw = Table(title="Top Keywords by Sentiment")
    for label in LABELS:
        kw.add_column(label.value)
    columns = [summary.keywords[label] for label in LABELS]
    for i in range(max((len(c) for c in columns), default=0)):
        kw.add_row(*(f"{c[i][0]} ({c[i][1]})" if i < len(c) else "" for c in columns))
    console.print(kw)

    hist = Table(title="Confidence Score Distribution")
    hist.add_column("Range (%)")
    hist.add_column("Texts", justify="right")
    for name, count in summary.histogram:
        hist.add_row(name, str(count))
    console.print(hist)

    if summary.evaluation is not None:
        _render_evaluation(summary.evaluation)


@cli_app.command()
def analyze(
    text: Optional[str] = typer.Argument(None, help="Text to analyze, one item per line"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read input from a text file"),
    export: Optional[list[str]] = typer.Option(None, "--export", "-e", help="Export format: json, csv or pdf"),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Directory for exported files"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON structured logs"),
):
    """Analyze a batch of lines and show the dashboard."""
    settings = _load_settings()
    setup_logging(settings.log_level, json_output=json_logs)

    for fmt in export or []:
        if fmt.lower() not in EXPORT_FORMATS:
            log.error(f"Unknown export format: {fmt}")
            raise typer.Exit(code=2)

    try:
        raw = read_upload(file) if file else (text or "")
    except OSError as e:
        log.error(f"Cannot read {file}: {e}")
        raise typer.Exit(code=1)

    ground_truth = _ground_truth(settings)
    client = _make_client(settings)
    try:
        session = AnalysisSession(client, ground_truth=ground_truth)
        session.run(raw)
    finally:
        if hasattr(client, "close"):
            client.close()

    if session.error:
        console.print(f"[bold red]{session.error}[/bold red]")
        raise typer.Exit(code=1)

    _render_results(session.results)
    _render_summary(session.summary())

    target = out_dir or Path(settings.output_dir)
    for fmt in export or []:
        path = session.export(fmt, target)
        if path is not None:
            console.print(f"Saved {path}")


@cli_app.command()
def evaluate(
    results_file: Path = typer.Argument(..., help="JSON export produced by 'analyze --export json'"),
):
    """Evaluate a saved JSON export against the reference set."""
    try:
        settings = get_settings()
    except ValueError as e:
        log.error(f"Configuration error: {e}")
        raise typer.Exit(code=1)
    setup_logging(settings.log_level)

    try:
        data = json.loads(results_file.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("expected a JSON array")
        results = [AnalysisResult.from_dict(item) for item in data]
    except (OSError, ValueError) as e:
        log.error(f"Cannot read results from {results_file}: {e}")
        raise typer.Exit(code=1)

    report = evaluate_results(results, _ground_truth(settings))
    if report is None:
        console.print("None of the results are part of the labeled evaluation set.")
        return
    _render_evaluation(report)


@cli_app.command()
def validate():
    """Validate configuration without calling the API."""
    setup_logging("INFO")

    settings = _load_settings()
    log.info("Configuration validation passed!")
    log.info(f"  Model: {settings.gemini_model}")
    log.info(f"  Base URL: {settings.gemini_base_url}")
    log.info(f"  Timeout: {settings.request_timeout_sec}s")
    log.info(f"  Output dir: {settings.output_dir}")
    if settings.ground_truth_path:
        log.info(f"  Ground truth: {settings.ground_truth_path}")
    else:
        log.info("  Ground truth: bundled reference set")


if __name__ == "__main__":
    cli_app()
