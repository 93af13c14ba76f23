"""Command-line interface for the Certificate Template Engine."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .. import __version__

console = Console()


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _fail(message: str):
    console.print(f"[red]✗ {message}[/red]")
    sys.exit(1)


def _load_inputs(template_path, data_path=None, sheet=None):
    """Load a template and (optionally) a data source, exiting on errors."""
    from ..parsers import (
        DataSourceParseError,
        TemplateFormatError,
        load_data_source,
        load_template_file,
    )

    try:
        template = load_template_file(template_path)
    except TemplateFormatError as e:
        _fail(f"Error loading template: {e}")

    source = None
    if data_path:
        try:
            source = load_data_source(data_path, sheet_name=sheet)
        except DataSourceParseError as e:
            _fail(f"Error loading data: {e}")

    return template, source


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(exists=True), default=None,
              help="YAML settings file overriding the defaults")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Certificate Template Engine.

    Bind certificate templates to CSV/Excel data and generate PDFs.
    """
    from ..settings import get_settings, load_settings

    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_settings(config_path) if config_path else get_settings()


@cli.command()
@click.option("--template", "-t", "template_path", required=True, type=click.Path(exists=True),
              help="Template JSON file")
@click.option("--data", "-d", "data_path", required=True, type=click.Path(exists=True),
              help="CSV or Excel data file")
@click.option("--output", "-o", required=True, type=click.Path(),
              help="Output PDF (combined) or directory (separate)")
@click.option("--mode", "-m", type=click.Choice(["combined", "separate"]), default="combined",
              show_default=True, help="One multi-page PDF or one PDF per row")
@click.option("--filename-pattern", "-f", default=None,
              help="Filename pattern for separate mode, e.g. 'certificate_{{name}}'")
@click.option("--snapshot", is_flag=True, help="Use surface-snapshot rendering")
@click.option("--sheet", default=None, help="Excel sheet name")
@click.pass_context
def generate(ctx, template_path, data_path, output, mode, filename_pattern, snapshot, sheet):
    """Generate certificates for every data row."""
    from ..engine import BatchController, BatchInputError, GenerationError

    settings = ctx.obj["settings"]

    console.print(Panel.fit(
        "[bold blue]Certificate Template Engine[/bold blue]",
        border_style="blue"
    ))

    template, source = _load_inputs(template_path, data_path, sheet)
    if snapshot:
        template.use_snapshot_generation = True

    console.print(f"Template: [cyan]{template.name}[/cyan] ({template.element_count} elements)")
    console.print(f"Data: [cyan]{source.total_rows}[/cyan] rows, {len(source.headers)} columns")

    controller = BatchController(settings=settings)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Generating...", total=source.total_rows)

        def _advance(done, total):
            progress.update(task, completed=done)

        try:
            result = controller.generate(
                template,
                source.rows,
                mode=mode,
                filename_pattern=filename_pattern,
                progress=_advance,
            )
        except (BatchInputError, GenerationError) as e:
            _fail(f"Error generating certificates: {e}")

    if mode == "combined":
        path = result.save(output)
        console.print(f"\n[green]✓ Generated {result.page_count} pages:[/green] {path}")
        return

    output_dir = Path(output)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = 0
    for entry in result:
        if not entry.ok:
            console.print(f"[red]✗ Row {entry.index}: {entry.error}[/red]")
            continue
        entry.document.save(str(output_dir / entry.suggested_filename))
        written += 1

    console.print(f"\n[green]✓ Generated {written} of {len(result)} files in:[/green] {output_dir}")
    if written < len(result):
        sys.exit(1)


@cli.command()
@click.option("--template", "-t", "template_path", required=True, type=click.Path(exists=True),
              help="Template JSON file")
@click.option("--data", "-d", "data_path", required=True, type=click.Path(exists=True),
              help="CSV or Excel data file")
@click.option("--apply", "apply_path", type=click.Path(), default=None,
              help="Write the template with bindings applied and unmatched columns placed")
@click.pass_context
def match(ctx, template_path, data_path, apply_path):
    """Match data columns to template fields."""
    from ..engine import (
        apply_bindings,
        detect_fields,
        place_unmatched,
        propose_bindings,
        unmatched_headers,
    )
    from ..parsers import save_template_file

    settings = ctx.obj["settings"]
    template, source = _load_inputs(template_path, data_path)

    fields = detect_fields(template.elements)
    proposals = propose_bindings(source.headers, fields, settings.synonyms or None)

    table = Table(title="Field Bindings")
    table.add_column("Template Field", style="cyan")
    table.add_column("Data Column")
    table.add_column("Confidence", justify="center")
    colors = {"exact": "green", "fuzzy": "yellow", "none": "red"}
    for proposal in proposals:
        confidence = proposal.confidence.value
        table.add_row(
            proposal.template_field,
            proposal.matched_header or "-",
            f"[{colors[confidence]}]{confidence}[/{colors[confidence]}]",
        )
    console.print(table)

    mapping = {p.template_field: p.matched_header for p in proposals if p.matched_header}
    unmatched = unmatched_headers(source.headers, mapping)
    if unmatched:
        console.print(f"\n[yellow]Unmatched columns:[/yellow] {', '.join(unmatched)}")

    if apply_path:
        enriched = apply_bindings(template, mapping)
        enriched = place_unmatched(enriched, unmatched, settings.placement)
        path = save_template_file(enriched, apply_path)
        console.print(f"\n[green]✓ Saved bound template:[/green] {path}")


@cli.command()
@click.option("--data", "-d", "data_path", required=True, type=click.Path(exists=True),
              help="CSV or Excel data file")
@click.option("--require", "-r", "required", multiple=True,
              help="Required column (repeatable)")
@click.option("--template", "-t", "template_path", type=click.Path(exists=True), default=None,
              help="Check the columns this template binds")
def validate(data_path, required, template_path):
    """Validate a data file."""
    from ..parsers import (
        DataSourceParseError,
        TemplateFormatError,
        load_data_source,
        load_template_file,
        validate_columns,
        validate_data_source,
    )

    console.print(f"Validating: [cyan]{data_path}[/cyan]\n")

    try:
        source = load_data_source(data_path)
        template = load_template_file(template_path) if template_path else None
    except (DataSourceParseError, TemplateFormatError) as e:
        _fail(str(e))

    result = validate_data_source(source, template)
    for error in validate_columns(source.headers, required).errors:
        result.add_error(error)

    if result.is_valid:
        console.print(f"[green]✓ Valid data file with {source.total_rows} rows[/green]")
    else:
        console.print("[red]✗ Validation errors found:[/red]")
        for error in result.errors:
            console.print(f"  - {error.message}")

    if result.warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warning in result.warnings:
            prefix = f"Row {warning.row}: " if warning.row else ""
            console.print(f"  {prefix}{warning.message}")

    table = Table(title="Columns")
    table.add_column("Column", style="cyan")
    table.add_column("Example")
    first = source.first_row()
    for header in source.headers:
        table.add_row(header, first.get(header, ""))
    console.print(table)

    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.option("--template", "-t", "template_path", required=True, type=click.Path(exists=True),
              help="Template JSON file")
@click.option("--output", "-o", required=True, type=click.Path(),
              help="Output .png or .svg file")
@click.option("--data", "-d", "data_path", type=click.Path(exists=True), default=None,
              help="CSV or Excel data file")
@click.option("--row", "-r", "row_number", type=int, default=1, show_default=True,
              help="1-based data row used for dynamic text")
@click.option("--zoom", type=float, default=1.0, show_default=True,
              help="Extra resolution factor for PNG output")
@click.pass_context
def preview(ctx, template_path, output, data_path, row_number, zoom):
    """Render a preview of a template."""
    from ..drawing import RenderContext, render_preview_png, save_svg_preview

    settings = ctx.obj["settings"]
    template, source = _load_inputs(template_path, data_path)

    row = None
    if source is not None:
        if not 1 <= row_number <= source.total_rows:
            _fail(f"Row {row_number} is out of range (1-{source.total_rows})")
        row = source.rows[row_number - 1]

    path = Path(output)
    if path.suffix.lower() == ".svg":
        save_svg_preview(template, str(path), row, settings)
    else:
        context = RenderContext(
            raster_multiplier=settings.raster_multiplier * max(zoom, settings.min_zoom),
            min_zoom=settings.min_zoom,
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(render_preview_png(template, row, context, settings))

    console.print(f"[green]✓ Preview saved to:[/green] {path}")


@cli.command()
@click.option("--template", "-t", "template_path", required=True, type=click.Path(exists=True),
              help="Template JSON file")
@click.option("--output", "-o", required=True, type=click.Path(), help="Output JPEG file")
@click.option("--max-width", default=400, show_default=True, type=int)
@click.option("--max-height", default=300, show_default=True, type=int)
@click.pass_context
def thumbnail(ctx, template_path, output, max_width, max_height):
    """Create a JPEG thumbnail of a template."""
    from ..drawing import generate_thumbnail

    template, _ = _load_inputs(template_path)
    data = generate_thumbnail(
        template,
        max_width=max_width,
        max_height=max_height,
        settings=ctx.obj["settings"],
    )

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    console.print(f"[green]✓ Thumbnail saved to:[/green] {path}")


@cli.command("init-template")
@click.option("--output", "-o", required=True, type=click.Path(), help="Output template JSON")
@click.option("--from", "--from-image", "source_path", type=click.Path(exists=True), default=None,
              help="Start from a PDF, Word (.docx), image or template JSON file")
@click.option("--name", "-n", default=None, help="Template name")
def init_template(output, source_path, name):
    """Create a starter template."""
    from ..models import create_default_template
    from ..parsers import TemplateFormatError, parse_template_file, save_template_file

    if source_path:
        try:
            template = parse_template_file(source_path, name=name)
        except TemplateFormatError as e:
            _fail(str(e))
    else:
        template = create_default_template()
        if name:
            template.name = name

    path = save_template_file(template, output)
    console.print(f"[green]✓ Template saved to:[/green] {path}")
    console.print(f"  Orientation: {template.orientation.value}, elements: {template.element_count}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
