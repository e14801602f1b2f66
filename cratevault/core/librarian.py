"""Librarian — drives population of many crate versions in parallel.

The Librarian owns the retry-relevant policy that ``Corpus`` deliberately
leaves to its caller:

- failed transfers are logged and whatever was left at the target path is
  removed, so the next run starts from a clean, absent address;
- ``NotADirectoryConflict`` is recorded but never auto-resolved;
- nothing is retried within a run.

Each ``Corpus.populate`` call targets a distinct path, so the calls are
independent and run on a thread pool.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from cratevault.core.addressing import AddressError
from cratevault.core.corpus import Corpus, NotADirectoryConflict
from cratevault.errors import CrateVaultError
from cratevault.index.registry import RegistryIndex, RegistryIndexError
from cratevault.models.index import Krate
from cratevault.models.reports import PopulateFailure, PopulateReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, bool], None]


class Librarian:
    """Fans population of ``(name, version)`` pairs out over a thread pool.

    Parameters
    ----------
    corpus:
        The corpus that performs each individual population.
    index:
        Registry index used to expand crate names into versions.  Only
        needed by :meth:`resolve_versions`.
    max_workers:
        Size of the worker pool.
    """

    def __init__(
        self,
        corpus: Corpus,
        index: RegistryIndex | None = None,
        *,
        max_workers: int = 8,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.corpus = corpus
        self.index = index
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Version resolution
    # ------------------------------------------------------------------

    def resolve_versions(
        self,
        crates: Iterable[str] | None = None,
        *,
        include_yanked: bool = True,
    ) -> list[tuple[str, str]]:
        """Expand crate names into ``(name, version)`` pairs via the index.

        With ``crates=None`` every crate in the index is used.  Index errors
        are raised; a partial crate list would silently shrink the mirror.
        """
        if self.index is None:
            raise RuntimeError("Librarian has no registry index configured")

        krates: list[Krate] = []
        if crates is None:
            for item in self.index.all():
                if isinstance(item, RegistryIndexError):
                    raise item
                krates.append(item)
        else:
            krates = [self.index.get(name) for name in sorted(set(crates))]

        pairs = [
            (entry.name, entry.version)
            for krate in krates
            for entry in krate.iter_versions(include_yanked=include_yanked)
        ]
        logger.info("Resolved %d versions from %d crates", len(pairs), len(krates))
        return pairs

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def populate(
        self,
        pairs: Iterable[tuple[str, str]],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> PopulateReport:
        """Populate every pair, returning a report of successes and failures.

        Duplicate pairs are populated once.  A failure to clean up after a
        failed population propagates and ends the run.
        """
        report = PopulateReport()

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self.corpus.populate, name, version): (name, version)
                for name, version in dict.fromkeys(pairs)
            }
            for future in as_completed(futures):
                name, version = futures[future]
                try:
                    path = future.result()
                except CrateVaultError as exc:
                    report.failures.append(self._handle_failure(name, version, exc))
                    ok = False
                else:
                    report.populated.append(path)
                    ok = True

                if on_progress is not None:
                    on_progress(name, version, ok)

        report.populated.sort()
        logger.info(
            "Populate finished: %d present, %d failed",
            len(report.populated),
            len(report.failures),
        )
        return report

    def _handle_failure(
        self, name: str, version: str, exc: CrateVaultError
    ) -> PopulateFailure:
        logger.error("Error populating %s %s: %s", name, version, exc)

        cleaned_up = False
        # Invalid addresses have nothing on disk; conflicts belong to the operator.
        if not isinstance(exc, (AddressError, NotADirectoryConflict)):
            cleaned_up = self._remove_target(self.corpus.path(name, version))

        return PopulateFailure(
            name=name,
            version=version,
            error_type=type(exc).__name__,
            message=str(exc),
            cleaned_up=cleaned_up,
        )

    @staticmethod
    def _remove_target(target: Path) -> bool:
        """Remove whatever sits at *target*; True if something was removed."""
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
            logger.warning("Removed %s after failed population", target)
            return True
        return False
