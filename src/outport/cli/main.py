"""
Outport CLI — export JSON and JSON Lines records to CSV or JSON files.

Usage:
    outport export records.jsonl --output users.csv
    outport export records.json -o users.csv --columns id --columns name --bom
    outport export events.ndjson -o events.json --mode append --compact
"""

import asyncio
import logging

import click

from outport.models.options import DEFAULT_BATCH_SIZE


@click.group()
@click.version_option(package_name="outport")
def cli():
    """Outport — export records to CSV and JSON files."""
    pass


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Destination .csv or .json file.",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default=None,
    help="Output format. Inferred from the output extension when omitted.",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["write", "append"]),
    default="write",
    help="Overwrite the output file or append to it.",
)
@click.option("--delimiter", type=str, default=",", help="CSV delimiter character.")
@click.option("--quote", type=str, default='"', help="CSV quote character.")
@click.option("--columns", "-c", multiple=True, help="CSV keys to export, in order.")
@click.option("--bom", is_flag=True, help="Prefix the output with a UTF-8 BOM.")
@click.option("--flatten", is_flag=True, help="Flatten nested objects into parent_child columns.")
@click.option("--compact", is_flag=True, help="Write single-line JSON.")
@click.option("--indent", type=click.IntRange(0, 10), default=2, help="JSON indent width.")
@click.option(
    "--batch-size",
    "-b",
    type=click.IntRange(min=1),
    default=DEFAULT_BATCH_SIZE,
    envvar="OUTPORT_BATCH_SIZE",
    show_default=True,
    help="Records per write batch.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def export(
    input_path,
    output_path,
    fmt,
    mode,
    delimiter,
    quote,
    columns,
    bom,
    flatten,
    compact,
    indent,
    batch_size,
    verbose,
):
    """Stream records from INPUT (.json, .jsonl or .ndjson) into the output file."""
    from pathlib import Path

    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

    from outport.builder import outport
    from outport.errors import ValidationError
    from outport.io.sources import read_records

    # Configure logging
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    builder = (
        outport()
        .to(output_path)
        .in_mode(mode)
        .with_batch_size(batch_size)
        .with_delimiter(delimiter)
        .with_quote(quote)
        .with_flattening(flatten)
        .pretty_print(not compact)
        .with_indent(indent)
    )
    if fmt:
        builder.as_type(fmt)
    if columns:
        builder.with_columns(columns)
    if bom:
        builder.with_utf8_bom()

    console = Console(stderr=True)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} records"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("[green]Exporting...[/green]", total=None)
        builder.on_progress(lambda current, total=None: progress.update(task_id, completed=current))

        try:
            result = asyncio.run(builder.from_async_generator(read_records(Path(input_path))))
        except ValidationError as e:
            raise click.BadParameter(str(e)) from e

    if not result.success:
        raise click.ClickException(f"Export failed: {result.error}")

    console.print(f"[bold green][DONE][/bold green] Exported {result.value} records to {output_path}")


if __name__ == "__main__":
    cli()
