"""
Command-line interface for datetime-merger.

Provides commands to extract merged date/time spans from text and to
validate the configured pattern tables.

Usage:
    datetime-merger extract "meeting after 3pm"   # Print recognized spans
    datetime-merger extract --json "move 3pm appointment to 4"
    datetime-merger stream --metrics < texts.txt  # One JSON line per input line
    datetime-merger check-patterns                # Validate pattern tables
"""

import json
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import TextIO

import click

from src.observability.logging import bind_context, clear_context, setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Datetime Merger - merged date/time span extraction."""
    setup_logging("DEBUG" if debug else None)


@main.command()
@click.argument("text")
@click.option(
    "--reference",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]),
    help="Reference instant (defaults to now)",
)
@click.option("--calendar-mode", is_flag=True, help="Apply the calendar deny list")
@click.option("--skip-from-to", is_flag=True, help="Skip 'from X to Y' candidates")
@click.option("--preview", is_flag=True, help="Enable preview stages")
@click.option("--extended", is_flag=True, help="Enable extended types")
@click.option(
    "--superfluous",
    multiple=True,
    help="Filler word stripped in preview mode (can repeat)",
)
@click.option(
    "--candidates-dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of JSONL candidate pattern files",
)
@click.option("--json", "as_json", is_flag=True, help="Print spans as JSON")
def extract(
    text: str,
    reference: datetime | None,
    calendar_mode: bool,
    skip_from_to: bool,
    preview: bool,
    extended: bool,
    superfluous: tuple[str, ...],
    candidates_dir: Path | None,
    as_json: bool,
) -> None:
    """Extract merged date/time spans from TEXT.

    Example:
        datetime-merger extract "sales after 2010 and before 2018"
        datetime-merger extract --calendar-mode --json "this week's episode"
    """
    from src.merge.config import MergeConfig
    from src.merge.service import MergedDateTimeExtractor
    from src.merge.sources import RegexSuperfluousWordFilter

    # Only set flags override the environment
    overrides: dict[str, object] = {}
    if calendar_mode:
        overrides["calendar_mode"] = True
    if skip_from_to:
        overrides["skip_from_to_merge"] = True
    if preview:
        overrides["enable_preview"] = True
    if extended:
        overrides["extended_types"] = True
    if candidates_dir is not None:
        overrides["candidates_dir"] = candidates_dir

    extractor = MergedDateTimeExtractor(
        config=MergeConfig(**overrides),
        superfluous_filter=RegexSuperfluousWordFilter(superfluous) if superfluous else None,
    )
    bind_context(request_id=str(uuid.uuid4()))
    try:
        spans = extractor.extract(text, reference)
    finally:
        clear_context()

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in spans], indent=2))
        return

    if not spans:
        click.echo("No date/time spans found")
        return

    for span in spans:
        click.echo(f"{span.start:>4}  {span.length:>3}  {span.category:<14} {span.text}")


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--reference",
    default=None,
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]),
    help="Reference instant shared by every line (defaults to now)",
)
@click.option("--metrics", is_flag=True, help="Expose Prometheus metrics while running")
@click.option(
    "--metrics-port",
    default=None,
    type=click.IntRange(1, 65535),
    help="Metrics port (defaults to METRICS_PORT)",
)
def stream(
    source: TextIO,
    reference: datetime | None,
    metrics: bool,
    metrics_port: int | None,
) -> None:
    """Extract spans from each line of SOURCE (stdin by default).

    Prints one JSON array of spans per input line. Option flags come from
    the MERGE_* environment.

    Example:
        tail -f messages.log | datetime-merger stream --metrics
    """
    from src.merge.service import MergedDateTimeExtractor
    from src.observability.metrics import get_metrics

    if metrics:
        get_metrics().start_server(port=metrics_port)

    extractor = MergedDateTimeExtractor()

    for line in source:
        bind_context(request_id=str(uuid.uuid4()))
        try:
            spans = extractor.extract(line.rstrip("\r\n"), reference)
        finally:
            clear_context()
        click.echo(json.dumps([s.to_dict() for s in spans]))


@main.command("check-patterns")
@click.option(
    "--candidates-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of JSONL candidate pattern files",
)
def check_patterns(candidates_dir: Path | None) -> None:
    """Compile the pattern tables and candidate files, reporting errors."""
    from src.merge.config import MergeConfig
    from src.merge.patterns import PatternConfigError, english_patterns
    from src.merge.sources import RegexCandidateSource

    directory = candidates_dir or MergeConfig().candidates_dir

    try:
        patterns = english_patterns()
        source = RegexCandidateSource.from_directory(directory)
    except PatternConfigError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)

    click.echo("\nPattern Check Results:")
    click.echo("-" * 40)
    click.echo(f"  Ambiguity rules: {len(patterns.ambiguity_rules)}")
    click.echo(f"  Calendar filters: {len(patterns.calendar_filters)}")
    click.echo(f"  Modifier patterns: {len(patterns.modifiers)}")
    click.echo(f"  Candidate patterns: {source.pattern_count}")
    click.echo(f"  Categories: {', '.join(source.categories) or '-'}")
    click.echo("-" * 40)

    if source.pattern_count == 0:
        click.echo(click.style(f"No candidate patterns found in {directory}", fg="yellow"))
        sys.exit(1)

    click.echo(click.style("All patterns compiled successfully!", fg="green"))


if __name__ == "__main__":
    main()
