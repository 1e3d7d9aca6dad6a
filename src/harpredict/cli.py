"""Command-line interface for the harpredict pipeline."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from harpredict.config.settings import PipelineConfig
    from harpredict.evaluation.metrics import EvaluationResult
    from harpredict.modeling.models import ClassifierKind
    from harpredict.pipeline import PreparedData

app = typer.Typer(
    name="harpredict",
    help="Weight-lifting exercise quality classification from wearable sensor data.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."),
    ] = "INFO",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit log events as JSON lines."),
    ] = False,
) -> None:
    """Configure logging for all commands."""
    from harpredict.utils.logging import configure_logging

    configure_logging(level=log_level, json_output=json_logs)


def _load(config: Path, output: Path | None = None) -> "PipelineConfig":
    """Load configuration, optionally redirecting the output root."""
    from harpredict.config.loader import load_config
    from harpredict.config.settings import OutputConfig

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    pipeline_config = load_config(config)
    if output is not None:
        pipeline_config = pipeline_config.model_copy(
            update={"output": OutputConfig(output_root=output)}
        )
    return pipeline_config


def _print_data_summary(prepared: "PreparedData") -> None:
    """Print raw and selected table shapes."""
    selection = prepared.selection

    table = Table(title="Data Summary")
    table.add_column("Table", style="cyan")
    table.add_column("Raw rows", justify="right")
    table.add_column("Raw columns", justify="right")
    table.add_column("Predictors", justify="right", style="green")

    for name in ("training", "prediction"):
        rows, cols = prepared.raw_shapes[name]
        table.add_row(name, str(rows), str(cols), str(len(selection.schema.predictors)))
    console.print(table)

    counts = selection.training[selection.schema.label_column].value_counts().sort_index()
    classes = ", ".join(f"{label}={n}" for label, n in counts.items())
    console.print(f"[dim]Classes: {classes}[/dim]")


def _print_selection_summary(prepared: "PreparedData") -> None:
    """Print the number of predictors removed by each filter."""
    from harpredict.selection.pipeline import FILTERS

    selection = prepared.selection
    n_before = len(prepared.cleaned.schema.predictors)

    table = Table(title="Feature Selection")
    table.add_column("Filter", style="cyan")
    table.add_column("Dropped", justify="right")
    table.add_column("Remaining", justify="right", style="green")

    remaining = n_before
    table.add_row("cleaned", "-", str(remaining))
    for name in FILTERS:
        n_dropped = len(selection.dropped.get(name, []))
        remaining -= n_dropped
        table.add_row(name, str(n_dropped), str(remaining))
    console.print(table)


def _print_comparison(
    evaluations: "dict[ClassifierKind, EvaluationResult]",
    best: "ClassifierKind",
) -> None:
    """Print the model comparison table, best model highlighted."""
    from harpredict.modeling.models import ClassifierKind

    table = Table(title="Model Comparison")
    table.add_column("Model", style="cyan")
    table.add_column("Accuracy (CV)", justify="right")
    table.add_column("In-sample", justify="right")
    table.add_column("Out-of-sample", justify="right", style="green")
    table.add_column("95% CI", justify="right")
    table.add_column("Kappa", justify="right")
    table.add_column("Gap", justify="right")
    table.add_column("Time (s)", justify="right", style="dim")

    gap_styles = {"low": "green", "moderate": "yellow", "high": "red"}
    for kind in ClassifierKind:
        if kind not in evaluations:
            continue
        result = evaluations[kind]
        oos = result.out_of_sample
        gap_style = gap_styles[result.overfitting_risk]
        name = f"[bold]{kind.value} *[/bold]" if kind is best else kind.value
        table.add_row(
            name,
            f"{result.cv_scores.get('accuracy_cv', float('nan')):.4f}",
            f"{result.in_sample.accuracy:.4f}",
            f"{oos.accuracy:.4f}",
            f"{oos.accuracy_lower:.3f}-{oos.accuracy_upper:.3f}",
            f"{oos.kappa:.4f}",
            f"[{gap_style}]{result.accuracy_gap:+.3f}[/{gap_style}]",
            f"{result.training_time_s:.1f}",
        )
    console.print(table)


def _print_confusion(result: "EvaluationResult") -> None:
    """Print the out-of-sample confusion matrix of one model."""
    confusion = result.out_of_sample.confusion

    table = Table(title=f"Confusion Matrix ({result.kind.value}, validation)")
    table.add_column("actual \\ predicted", style="cyan")
    for label in confusion.columns:
        table.add_column(str(label), justify="right")

    for label, row in confusion.iterrows():
        cells = [
            f"[green]{n}[/green]" if col == label else str(n) for col, n in row.items()
        ]
        table.add_row(str(label), *cells)
    console.print(table)


@app.command()
def run(
    config: ConfigOption,
    model: Annotated[
        list[str] | None,
        typer.Option(
            "--model",
            "-m",
            help="Classifier kind to compare (repeatable). Default: all enabled in config.",
        ),
    ] = None,
    tune: Annotated[
        bool | None,
        typer.Option(
            "--tune/--no-tune", help="Grid-search hyperparameters. Default: from config."
        ),
    ] = None,
    mlflow: Annotated[
        bool | None,
        typer.Option("--mlflow/--no-mlflow", help="Log the run to MLflow."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output root directory."),
    ] = None,
    top_n: Annotated[
        int,
        typer.Option("--top", help="Number of variable importances to show."),
    ] = 10,
) -> None:
    """Run the full pipeline and write the answer files."""
    from harpredict.pipeline import run_pipeline

    try:
        pipeline_config = _load(config, output)
        tune_hyperparameters = pipeline_config.training.tune if tune is None else tune

        console.print(f"[blue]Running pipeline for project {pipeline_config.project}[/blue]")
        console.print(f"[dim]Tuning: {'on' if tune_hyperparameters else 'off'}[/dim]")
        console.print(f"[dim]Output: {pipeline_config.project_dir}[/dim]")

        result = run_pipeline(
            pipeline_config,
            kinds=model or None,
            tune=tune_hyperparameters,
            track=mlflow,
        )
    except (FileNotFoundError, KeyError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Pipeline failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    _print_data_summary(result.prepared)
    _print_selection_summary(result.prepared)

    console.print()
    _print_comparison(result.evaluations, result.best)
    best = result.evaluations[result.best]
    console.print(
        f"\n[green]Best model: {result.best.label} "
        f"(out-of-sample error {best.out_of_sample.error_rate:.2%})[/green]"
    )
    _print_confusion(best)

    if result.importance is not None:
        ranked = result.importance.ranked(top_n)
        table = Table(title=f"Top {len(ranked)} Variables ({result.importance.importance_type})")
        table.add_column("Rank", justify="right", style="dim")
        table.add_column("Feature", style="cyan")
        table.add_column("Importance", justify="right")
        table.add_column("Share", justify="right", style="green")
        for rank, row in enumerate(ranked.itertuples(index=False), start=1):
            table.add_row(str(rank), row.feature, f"{row.importance:.4f}", f"{row.share:.1%}")
        console.print(table)

    console.print(
        f"\n[green]Wrote {len(result.answer_paths)} answer files to: "
        f"{pipeline_config.answers_dir}[/green]"
    )
    for path in result.report_paths:
        console.print(f"[dim]  {path}[/dim]")
    if result.run_id:
        console.print(f"[dim]MLflow run: {result.run_id}[/dim]")


@app.command()
def prepare(
    config: ConfigOption,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output root directory."),
    ] = None,
) -> None:
    """Load, clean and select features; save the prepared tables."""
    from harpredict.pipeline import prepare_data, save_prepared

    try:
        pipeline_config = _load(config, output)
        prepared = prepare_data(pipeline_config)
        paths = save_prepared(prepared, pipeline_config.cleaned_dir)
    except (FileNotFoundError, KeyError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Preparation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    _print_data_summary(prepared)
    _print_selection_summary(prepared)

    for name, columns in prepared.selection.dropped.items():
        if columns:
            preview = ", ".join(columns[:8])
            more = f" (+{len(columns) - 8} more)" if len(columns) > 8 else ""
            console.print(f"[dim]{name}: {preview}{more}[/dim]")

    for path in paths:
        console.print(f"\n[green]Saved to: {path}[/green]")


@app.command()
def validate(config: ConfigOption) -> None:
    """Check that both input tables exist and pass their schemas."""
    import pandera.errors

    from harpredict.ingestion.activity import PredictionTableLoader, TrainingTableLoader

    try:
        pipeline_config = _load(config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Input Validation")
    table.add_column("Table", style="cyan")
    table.add_column("Path")
    table.add_column("Status")

    failed = False
    for loader in (TrainingTableLoader(pipeline_config), PredictionTableLoader(pipeline_config)):
        name = loader.path_attr
        try:
            df = loader.load(validate=True)
            status = f"[green]✓ {len(df)} rows, {len(df.columns)} columns[/green]"
        except FileNotFoundError:
            status = "[red]✗ missing[/red]"
            failed = True
        except (pandera.errors.SchemaError, pandera.errors.SchemaErrors) as e:
            status = f"[red]✗ {e}[/red]"
            failed = True
        table.add_row(name, str(loader.path), status)

    console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def models() -> None:
    """List the available classifier kinds and their default parameters."""
    from harpredict.modeling.models import MODEL_REGISTRY, PARAM_GRIDS, list_models

    table = Table(title="Classifiers")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Estimator", style="dim")
    table.add_column("Defaults")
    table.add_column("Tuned", style="green")

    for kind in list_models():
        estimator, defaults = MODEL_REGISTRY[kind]
        grid = PARAM_GRIDS.get(kind, {})
        table.add_row(
            kind.value,
            kind.label,
            estimator.__name__,
            ", ".join(f"{k}={v}" for k, v in defaults.items()),
            ", ".join(k.removeprefix("model__") for k in grid) or "-",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from harpredict import __version__

    console.print(f"harpredict version {__version__}")


if __name__ == "__main__":
    app()
