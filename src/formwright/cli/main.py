"""CLI for formwright: generate / registry / serve commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from formwright.core.config import AppSettings
from formwright.core.startup_checks import validate_settings
from formwright.exceptions import FormwrightError
from formwright.hooks import setup_logging
from formwright.inference import create_completion_client
from formwright.models import GenerationResult
from formwright.pipeline import FormGenerationPipeline, GenerationOptions
from formwright.registry import default_registry

app = typer.Typer(name="formwright", help="Turn natural-language requests into typed form specifications")
console = Console()


def _build_settings(
    base_url: Optional[str],
    api_key: Optional[str],
    verbose: bool,
) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    settings = AppSettings()
    llm_overrides: dict = {}
    if base_url:
        llm_overrides["base_url"] = base_url
    if api_key:
        llm_overrides["api_key"] = api_key
    # Keep stderr quiet unless asked; --json output goes to stdout
    log_level = "DEBUG" if verbose else "WARNING"
    return settings.model_copy(
        update={
            "llm": settings.llm.model_copy(update=llm_overrides),
            "observability": settings.observability.model_copy(update={"log_level": log_level}),
        }
    )


def _print_form(result: GenerationResult) -> None:
    form = result.form
    table = Table(title=form.title)
    table.add_column("#", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Label", max_width=60)
    table.add_column("Req")
    table.add_column("Answer", style="magenta")

    for fld in form.fields:
        answer = ""
        if fld.quiz_config is not None:
            correct = fld.quiz_config.correct_answer
            answer = ", ".join(correct) if isinstance(correct, list) else correct
        table.add_row(str(fld.order), fld.id, fld.type, fld.label, "yes" if fld.required else "", answer)

    console.print(table)
    if form.quiz_mode is not None:
        console.print(f"Quiz mode: passing score {form.quiz_mode.passing_score}%")

    analysis = result.analysis
    console.print(f"\n[bold]Model:[/bold] {analysis.selected_model} ({analysis.complexity})")
    if analysis.skipped_stages:
        console.print(f"[yellow]Skipped stages:[/yellow] {', '.join(analysis.skipped_stages)}")


@app.command()
def generate(
    request: str = typer.Argument(..., help="What the form should collect or test"),
    quality: str = typer.Option("quick", "--quality", "-q", help="quick | high"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="Exact number of questions"),
    reference: Optional[Path] = typer.Option(None, "--reference", exists=True, dir_okay=False, help="Source material file"),
    context: Optional[str] = typer.Option(None, "--context", help="Extra context about the audience or use"),
    ensemble: Optional[bool] = typer.Option(None, "--ensemble/--no-ensemble"),
    validation: Optional[bool] = typer.Option(None, "--validation/--no-validation"),
    refinement: Optional[bool] = typer.Option(None, "--refinement/--no-refinement"),
    complexity: Optional[str] = typer.Option(None, "--complexity", help="simple | moderate | complex"),
    deadline: Optional[float] = typer.Option(None, "--deadline", help="Seconds before optional stages are skipped"),
    as_json: bool = typer.Option(False, "--json", help="Print the form as JSON"),
    output: Optional[Path] = typer.Option(None, help="Write the form JSON to this path"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="LLM base URL"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="LLM API key"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Generate a form from a natural-language request."""
    settings = _build_settings(base_url, api_key, verbose)
    try:
        validate_settings(settings)
        options = GenerationOptions(
            question_count=count,
            reference_data=reference.read_text(encoding="utf-8") if reference else None,
            user_context=context,
            quality=quality,
            enable_ensemble=ensemble,
            enable_validation=validation,
            enable_refinement=refinement,
            complexity=complexity,
            deadline_seconds=deadline,
        )
    except (FormwrightError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    setup_logging(settings.observability)
    pipeline = FormGenerationPipeline(create_completion_client(settings), settings)

    try:
        result = asyncio.run(pipeline.generate_with_analysis(request, options))
    except (FormwrightError, ValueError) as exc:
        console.print(f"[red]Generation failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    wire = result.form.to_wire()
    if output:
        output.write_text(json.dumps(wire, indent=2), encoding="utf-8")
        console.print(f"[green]Form saved to {output}[/green]")
    if as_json:
        typer.echo(json.dumps(wire, indent=2))
    elif not output:
        _print_form(result)


@app.command()
def registry(
    include_display: bool = typer.Option(False, "--display", help="Include non-input display types"),
) -> None:
    """List the field types a generated form may use."""
    reg = default_registry()
    table = Table(title="Field Types")
    table.add_column("Type", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Description", max_width=60)
    table.add_column("Options")

    for name in reg:
        desc = reg.get(name)
        if not desc.is_input and not include_display:
            continue
        table.add_row(name, desc.category, desc.description, "required" if desc.requires_options else "")

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8080, help="Bind port"),
) -> None:
    """Serve the HTTP API."""
    import uvicorn

    uvicorn.run("formwright.api.app:app", host=host, port=port)


if __name__ == "__main__":
    app()
