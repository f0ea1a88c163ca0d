# ==============================================================================
# UX Moments CLI
# ==============================================================================
"""
Command-line interface for detecting key UX moments in recorded sessions.

Usage:
    uxmoments --help
    uxmoments analyze
    uxmoments analyze "RRweb data.json" --events events.json --json
    uxmoments config show
    uxmoments version
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os
from typing import Annotated

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="uxmoments",
    help="Detect UX friction moments in session recordings",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Analyze command is imported from uxmoments.cli.analyze
from uxmoments.cli.analyze import analyze

app.command("analyze")(analyze)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from uxmoments.cli.config import config_show

config_app.command("show")(config_show)


@app.command("version")
def show_version(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Also list library versions")
    ] = False,
) -> None:
    """Show the installed uxmoments version."""
    from uxmoments.utils.versions import dependency_versions, get_uxmoments_version

    print(f"uxmoments {get_uxmoments_version()}")
    if verbose:
        for name, installed in dependency_versions().items():
            print(f"  {name:<18} {installed}")


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
