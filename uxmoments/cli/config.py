# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the uxmoments CLI.
"""

import json
from typing import Annotated

import typer

from uxmoments.cli.shared import C
from uxmoments.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration."""
    settings = get_settings()
    analysis = settings.analysis

    # JSON output mode
    if json_output:
        config = {
            "analysis": {
                "recordings_file": str(analysis.recordings_file),
                "events_file": str(analysis.events_file),
                "max_records_per_session": analysis.max_records_per_session,
                "include_context": analysis.include_context,
                "session_timeout_minutes": analysis.session_timeout_minutes,
            },
            "debug": settings.debug,
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    # Human-readable output
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Analysis{C.RESET}")
    print(f"  Recordings: {C.WHITE}{analysis.recordings_file}{C.RESET}")
    print(f"  Events:     {C.WHITE}{analysis.events_file}{C.RESET}")
    print(f"  Max records:{C.WHITE} {analysis.max_records_per_session}{C.RESET}")
    context = "included" if analysis.include_context else "omitted"
    print(f"  Context:    {C.WHITE}{context}{C.RESET}")
    print(f"  Timeout:    {C.WHITE}{analysis.session_timeout_minutes} minutes{C.RESET}")
    print()

    print(f"{C.CYAN}General{C.RESET}")
    print(f"  Debug:      {C.WHITE}{settings.debug}{C.RESET}")
    print(f"  Log level:  {C.WHITE}{settings.log_level}{C.RESET}")
    print()
