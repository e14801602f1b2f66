"""``cratevault list`` — crawl a vault and show the crate versions in it.

Every listing is a fresh scan of the vault tree; nothing is cached.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cratevault.config import settings
from cratevault.core.scanner import ScanError
from cratevault.core.vault import Vault

console = Console()
err_console = Console(stderr=True)


def list_cmd(
    vault_dir: Path = typer.Option(
        None,
        "--vault",
        "-v",
        help="Vault root (defaults to CRATEVAULT_VAULT_PATH).",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Stop at the first scan error instead of listing past it.",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print 'name version path' lines instead of a table.",
    ),
) -> None:
    """List the top-level crate versions found in the vault.

    Scan errors are printed to stderr and make the command exit with 1.
    With --strict the listing ends at the first error.
    """
    root = vault_dir or settings.vault_path
    if not root.is_dir():
        err_console.print(f"[bold red]Vault not found:[/bold red] {root}")
        raise typer.Exit(code=1)

    table = Table(title=f"Crates in {root}")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Path", style="dim")

    found = 0
    errors = 0
    try:
        for item in Vault(root).enumerate(strict=strict):
            if isinstance(item, ScanError):
                errors += 1
                err_console.print(f"[red]error:[/red] {item}")
                continue
            found += 1
            if plain:
                console.print(
                    f"{item.name} {item.version} {item.root}", highlight=False, soft_wrap=True
                )
            else:
                table.add_row(item.name, item.version, str(item.root))
    except ScanError as exc:
        errors += 1
        err_console.print(f"[bold red]Scan aborted:[/bold red] {exc}")

    if not plain:
        console.print(table)
        console.print(f"[bold]{found}[/bold] crate versions, [bold]{errors}[/bold] errors")

    if errors:
        raise typer.Exit(code=1)
