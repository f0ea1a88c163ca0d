# ==============================================================================
# Analyze Command
# ==============================================================================
"""
Analyze command for the uxmoments CLI.

Loads recorded sessions (and optionally analytics events), detects key
moments in every session, correlates them with the analytics events, and
prints either JSON or a summary box.
"""

import json
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from uxmoments.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header_plain,
    configure_logging,
)
from uxmoments.core.engine import MomentEngine
from uxmoments.core.errors import InvalidInputError
from uxmoments.core.formatting import (
    describe_moment,
    format_time_diff,
    summarize_moments,
    truncate,
)
from uxmoments.core.models import CorrelatedMoment, ExternalEvent
from uxmoments.core.sessionizer import group_external_events
from uxmoments.infrastructure.files import JsonExternalEventSource, JsonRecordingSource
from uxmoments.utils.config import get_settings


# ==============================================================================
# Helpers
# ==============================================================================


def _fail(message: str, json_output: bool) -> NoReturn:
    if json_output:
        print(json.dumps({"error": message}))
    else:
        print(f"\n{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}\n")
    raise typer.Exit(1)


def _load_external_events(path: Path, explicit: bool, json_output: bool) -> list[ExternalEvent]:
    """Load analytics events. A missing default file just means no events."""
    if not explicit and not path.exists():
        return []
    try:
        return JsonExternalEventSource(path).load_events()
    except (FileNotFoundError, InvalidInputError) as e:
        _fail(str(e), json_output)


def _to_records(correlated: list[CorrelatedMoment], include_context: bool) -> list[dict]:
    records = []
    for item in correlated:
        record = item.to_record()
        if not include_context:
            record.pop("context", None)
        records.append(record)
    return records


def _print_summary(
    correlated: list[CorrelatedMoment],
    session_count: int,
    event_count: int,
    analytics_session_count: int,
) -> None:
    W = BOX_WIDTH
    summary = summarize_moments(correlated)

    print()
    print(_box_header("UX MOMENTS", W))
    print(_empty_line(W))
    print(_box_line(f"  Sessions analyzed:   {C.WHITE}{session_count}{C.RESET}", W))
    print(_box_line(f"  Key moments:         {C.WHITE}{len(correlated)}{C.RESET}", W))
    print(_box_line(f"  Analytics events:    {C.WHITE}{event_count}{C.RESET}", W))
    print(_box_line(f"  Analytics sessions:  {C.WHITE}{analytics_session_count}{C.RESET}", W))
    print(_box_line(f"  Matched events:      {C.WHITE}{summary['external_matches']}{C.RESET}", W))
    print(_empty_line(W))

    print(_section_header_plain("Moments by type", W))
    if not summary["by_type"]:
        print(_box_line(f"  {C.DIM}No moments detected{C.RESET}", W))
    for pattern, count in summary["by_type"].items():
        print(_box_line(f"  {C.WHITE}{count:>5}{C.RESET}  {pattern}", W))
    print(_empty_line(W))

    if summary["by_url"]:
        print(_section_header_plain("Pages", W))
        for url, patterns in summary["by_url"].items():
            print(_box_line(f"  {I.BULLET} {C.WHITE}{truncate(url, W - 10)}{C.RESET}", W))
            print(_box_line(f"      {C.DIM}{truncate(', '.join(patterns), W - 12)}{C.RESET}", W))
        print(_empty_line(W))

    print(_box_bottom(W))
    print()


def _print_details(correlated: list[CorrelatedMoment]) -> None:
    """One table row per moment, with the nearest analytics event if any."""
    console = Console()
    table = Table(title="Key Moments", show_header=True, header_style="bold")
    table.add_column("Session")
    table.add_column("Type")
    table.add_column("Details")
    table.add_column("Nearest event")

    for item in correlated:
        moment = item.moment
        nearest = ""
        if item.nearby_external_events:
            event = item.nearby_external_events[0]
            nearest = f"{event.kind} ({format_time_diff(event.timestamp - moment.timestamp)})"
        table.add_row(
            moment.session_id,
            moment.type.value,
            truncate(describe_moment(moment), 60),
            nearest,
        )

    console.print(table)


# ==============================================================================
# Commands
# ==============================================================================


def analyze(
    recordings: Annotated[
        Optional[Path],
        typer.Argument(help="Recorded sessions JSON file (default: ANALYSIS_RECORDINGS_FILE)"),
    ] = None,
    events: Annotated[
        Optional[Path],
        typer.Option("--events", "-e", help="Analytics events JSON file"),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output correlated moments as JSON")
    ] = False,
    no_context: Annotated[
        bool, typer.Option("--no-context", help="Omit surrounding events from JSON output")
    ] = False,
    details: Annotated[
        bool, typer.Option("--details", "-d", help="List every moment after the summary")
    ] = False,
) -> None:
    """Detect key UX moments in recorded sessions.

    Every session is scanned for friction patterns (rage clicks, dead clicks,
    form abandonment, ...) and each moment is joined with analytics events
    recorded within 30 seconds of it.

    Examples:
        uxmoments analyze                          # Use configured files
        uxmoments analyze recordings.json -e events.json --json
        uxmoments analyze recordings.json --details
    """
    settings = get_settings()
    analysis = settings.analysis
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    recordings_path = recordings or analysis.recordings_file
    try:
        sessions = JsonRecordingSource(
            recordings_path, max_records_per_session=analysis.max_records_per_session
        ).load_sessions()
    except (FileNotFoundError, InvalidInputError) as e:
        _fail(str(e), json_output)

    external_events = _load_external_events(
        events or analysis.events_file, explicit=events is not None, json_output=json_output
    )

    engine = MomentEngine()
    try:
        correlated = engine.analyze_sessions(sessions, external_events)
    except InvalidInputError as e:
        _fail(str(e), json_output)

    if json_output:
        include_context = analysis.include_context and not no_context
        print(json.dumps(_to_records(correlated, include_context), indent=2))
        return

    analytics_sessions = group_external_events(
        external_events, timeout_minutes=analysis.session_timeout_minutes
    )
    _print_summary(correlated, len(sessions), len(external_events), len(analytics_sessions))
    if details:
        _print_details(correlated)
