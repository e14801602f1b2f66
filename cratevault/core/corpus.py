"""Corpus — populates vault addresses with freshly fetched crate trees.

Population protocol for one ``(name, version)``:

1. Resolve the target path through the vault.
2. Existing directory -> done, nothing is fetched or re-validated.
   Existing non-directory -> ``NotADirectoryConflict``.
3. Otherwise create (and canonicalize) the parent chain, fetch the archive,
   and extract it into a fresh temporary directory under the vault root.
4. ``os.rename`` the ``{name}-{version}/`` subtree onto the target.

The rename is the only state transition visible at the target path, so a
directory there is always complete.  A failure before it leaves the target
absent and the temporary directory is removed with its context, which
makes a retry indistinguishable from a first attempt.
"""

from __future__ import annotations

import errno
import logging
import os
import stat
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from cratevault.core.vault import STAGING_PREFIX, Vault
from cratevault.errors import CrateVaultError
from cratevault.transport.base import (
    ArchiveExtractor,
    ExtractionError,
    Fetcher,
    TransferError,
    TransportError,
)

logger = logging.getLogger(__name__)


class PopulateError(CrateVaultError):
    """Base class for failures of the population protocol itself."""


class NotADirectoryConflict(PopulateError):
    """The target path exists but is not a directory.  Never auto-resolved."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"path exists, but is not a directory: {path}")
        self.path = path


class StoreIOError(PopulateError):
    """A filesystem operation on the vault failed."""

    def __init__(self, message: str, cause: OSError | ValueError) -> None:
        super().__init__(f"{message}: {cause}")
        self.__cause__ = cause


class _KeyLocks:
    """Per-``(name, version)`` locks, dropped once no thread holds or awaits them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._users: dict[tuple[str, str], int] = {}

    @contextmanager
    def hold(self, name: str, version: str) -> Iterator[None]:
        key = (name, version)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class Corpus:
    """Writes crate trees into a vault, one atomic rename per crate version.

    Parameters
    ----------
    root:
        Vault root.  Created if missing and made absolute, so every path
        handed out by this corpus is canonical.
    fetcher:
        Source of archive byte streams.
    extractor:
        Unpacks a byte stream into a directory.
    exclusive:
        When True, concurrent ``populate`` calls for the same key inside
        this process are serialized and only the first one fetches.  When
        False (the default) two racing calls may both fetch; the loser's
        staged tree is discarded.
    """

    def __init__(
        self,
        root: Path | str,
        fetcher: Fetcher,
        extractor: ArchiveExtractor,
        *,
        exclusive: bool = False,
    ) -> None:
        root = Path(root).resolve()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreIOError(f"creating vault root {root}", exc) from exc

        self.vault = Vault(root)
        self._fetcher = fetcher
        self._extractor = extractor
        self._locks = _KeyLocks() if exclusive else None

    @property
    def root(self) -> Path:
        return self.vault.root

    def path(self, name: str, version: str) -> Path:
        """Target path for *name* at *version* (no I/O)."""
        return self.vault.resolve(name, version)

    def populate(self, name: str, version: str) -> Path:
        """Ensure *name* at *version* is present in the vault.

        Returns the target directory, with its parent chain resolved.  An
        existing directory is returned without fetching anything, so repeated
        calls for one key return equal paths.

        Raises
        ------
        InvalidName, InvalidVersion
            For empty inputs.
        NotADirectoryConflict
            If something other than a directory sits at the target.
        TransportError, ExtractionError
            If fetching or unpacking failed.  The target stays absent.
        StoreIOError
            For filesystem failures around staging and the final rename, and
            for keys the filesystem cannot represent (e.g. an embedded NUL).
        """
        if self._locks is None:
            return self._populate(name, version)

        with self._locks.hold(name, version):
            return self._populate(name, version)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _populate(self, name: str, version: str) -> Path:
        target = self.path(name, version)

        try:
            if self._check_present(target):
                target = self._canonical(target)
                logger.debug("%s %s already present at %s", name, version, target)
                return target
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"inspecting {target}", exc) from exc

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target = self._canonical(target)
        except (OSError, ValueError) as exc:
            raise StoreIOError(f"creating {target.parent}", exc) from exc

        try:
            staging = tempfile.TemporaryDirectory(prefix=STAGING_PREFIX, dir=self.root)
        except OSError as exc:
            raise StoreIOError(f"creating staging directory in {self.root}", exc) from exc

        with staging as staging_dir:
            staged = self._stage(name, version, Path(staging_dir))
            self._commit(staged, target)

        logger.info("Populated %s %s at %s", name, version, target)
        return target

    @staticmethod
    def _canonical(target: Path) -> Path:
        return target.parent.resolve(strict=True) / target.name

    @staticmethod
    def _check_present(target: Path) -> bool:
        try:
            st = target.stat()
        except FileNotFoundError:
            return False
        if stat.S_ISDIR(st.st_mode):
            return True
        raise NotADirectoryConflict(target)

    def _stage(self, name: str, version: str, staging_dir: Path) -> Path:
        """Fetch and extract into *staging_dir*; return the crate subtree."""
        try:
            stream = self._fetcher.fetch(name, version)
        except TransferError:
            raise
        except OSError as exc:
            raise TransportError(f"fetching {name} {version}: {exc}") from exc

        with stream:
            try:
                self._extractor.extract(stream, staging_dir)
            except TransferError:
                raise
            except OSError as exc:
                raise ExtractionError(f"extracting {name} {version}: {exc}") from exc

        staged = staging_dir / f"{name}-{version}"
        if not staged.is_dir():
            raise ExtractionError(
                f"archive for {name} {version} has no top-level {staged.name}/ directory"
            )
        return staged

    @staticmethod
    def _commit(staged: Path, target: Path) -> None:
        try:
            os.rename(staged, target)
        except OSError as exc:
            if exc.errno in (errno.EEXIST, errno.ENOTEMPTY) and target.is_dir():
                logger.warning(
                    "Lost populate race for %s; keeping the existing directory", target
                )
                return
            raise StoreIOError(f"renaming {staged} to {target}", exc) from exc
