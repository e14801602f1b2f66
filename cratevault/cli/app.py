"""Main Typer application — registers all CLI commands.

Entry point: ``cratevault`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from cratevault.cli.commands.list_cmd import list_cmd
from cratevault.cli.commands.path_cmd import path_cmd
from cratevault.cli.commands.populate import populate_cmd
from cratevault.config import configure_logging, settings

app = typer.Typer(
    name="cratevault",
    help="cratevault: a deterministic on-disk mirror of registry crates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to CRATEVAULT_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or settings.log_level)


# Register subcommands
app.command(name="path", help="Print the vault path for a crate version.")(path_cmd)
app.command(name="list", help="List the crate versions present in a vault.")(list_cmd)
app.command(name="populate", help="Download crates from the index into a vault.")(
    populate_cmd
)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
