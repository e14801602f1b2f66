"""``cratevault path NAME VERSION`` — print where a crate version lives."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from cratevault.config import settings
from cratevault.core.addressing import AddressError
from cratevault.core.vault import Vault

console = Console()
err_console = Console(stderr=True)


def path_cmd(
    name: str = typer.Argument(..., help="Crate name."),
    version: str = typer.Argument(..., help="Crate version."),
    vault_dir: Path = typer.Option(
        None,
        "--vault",
        "-v",
        help="Vault root (defaults to CRATEVAULT_VAULT_PATH).",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Exit with code 1 if the crate version is not present.",
    ),
) -> None:
    """Print the target directory of NAME at VERSION.

    Pure path arithmetic; the vault is only touched with ``--check``.
    """
    vault = Vault(vault_dir or settings.vault_path)
    try:
        path = vault.resolve(name, version)
    except AddressError as exc:
        err_console.print(f"[bold red]Invalid address:[/bold red] {exc}")
        raise typer.Exit(code=2)

    console.print(str(path), highlight=False, soft_wrap=True)
    if check and not path.is_dir():
        raise typer.Exit(code=1)
