"""``cratevault populate`` — mirror crates from a registry index into a vault.

Versions come from a local index checkout.  Each version is fetched from
the download host and extracted into the vault; versions already present
are skipped without any network traffic.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
)

from cratevault.config import settings
from cratevault.core.corpus import Corpus
from cratevault.core.librarian import Librarian
from cratevault.errors import CrateVaultError
from cratevault.index.registry import RegistryIndex
from cratevault.transport import HttpFetcher, TarGzExtractor

console = Console()


def _parse_crate_set(value: str | None) -> list[str] | None:
    if value is None:
        return None
    names = {part.strip() for part in value.split(",")}
    return sorted(name for name in names if name)


def populate_cmd(
    vault_dir: Path = typer.Option(
        None,
        "--vault",
        "-v",
        help="Vault root to populate (defaults to CRATEVAULT_VAULT_PATH).",
    ),
    index_dir: Path = typer.Option(
        None,
        "--index",
        "-i",
        help="Registry index checkout (defaults to CRATEVAULT_INDEX_PATH).",
    ),
    crates: str = typer.Option(
        None,
        "--crates",
        help="Comma separated crate names; all crates in the index if omitted.",
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Parallel downloads (defaults to CRATEVAULT_MAX_WORKERS).",
    ),
    skip_yanked: bool = typer.Option(
        False,
        "--skip-yanked",
        help="Do not download yanked versions.",
    ),
) -> None:
    """Populate the vault with every version of the selected crates."""
    vault_root = vault_dir or settings.vault_path
    index_root = index_dir or settings.index_path

    fetcher = HttpFetcher(
        settings.download_url,
        timeout=settings.request_timeout_seconds,
        user_agent=settings.user_agent,
    )
    try:
        index = RegistryIndex(index_root)
        corpus = Corpus(
            vault_root,
            fetcher,
            TarGzExtractor(),
            exclusive=settings.exclusive_populate,
        )
        librarian = Librarian(
            corpus, index, max_workers=workers or settings.max_workers
        )
        pairs = librarian.resolve_versions(
            _parse_crate_set(crates), include_yanked=not skip_yanked
        )
    except CrateVaultError as exc:
        fetcher.close()
        console.print(f"[bold red]Cannot start populate:[/bold red] {exc}")
        raise typer.Exit(code=1)

    with fetcher, Progress(
        TextColumn("Downloading crates"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("populate", total=len(pairs))
        report = librarian.populate(
            pairs, on_progress=lambda name, version, ok: progress.advance(task)
        )

    style = "green" if report.ok else "red"
    lines = [
        f"[bold]Vault:[/bold]      {vault_root}",
        f"[bold]Requested:[/bold]  {len(pairs)}",
        f"[bold]Present:[/bold]    {len(report.populated)}",
        f"[bold]Failed:[/bold]     {len(report.failures)}",
    ]
    for failure in report.failures[:10]:
        lines.append(
            f"  [red]{failure.name} {failure.version}[/red]: {failure.error_type}"
        )
    if len(report.failures) > 10:
        lines.append(f"  [dim]... and {len(report.failures) - 10} more[/dim]")

    console.print(
        Panel(
            "\n".join(lines),
            title="[bold]cratevault populate[/bold]",
            border_style=style,
            padding=(1, 2),
        )
    )

    if not report.ok:
        raise typer.Exit(code=1)
