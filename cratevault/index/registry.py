"""Registry index reader.

The index is a directory tree (normally a git checkout maintained by some
other tool) with one file per crate at ``shard(name)``, holding one JSON
object per published version::

    {root}/se/rd/serde    ->  {"name": "serde", "vers": "1.0.0", ...}\\n...

Only reading is implemented here; keeping the checkout up to date is the
job of whatever mirrors it.
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from cratevault.core import addressing
from cratevault.core.corpus import NotADirectoryConflict
from cratevault.errors import CrateVaultError
from cratevault.models.index import CRATE_NAME_PATTERN, IndexEntry, Krate

logger = logging.getLogger(__name__)

# Index entries (files and directories) whose names fall outside this set
# are not crates: ``.git``, ``config.json``, editor droppings.
_CRATE_NAME_RE = re.compile(CRATE_NAME_PATTERN)


class RegistryIndexError(CrateVaultError):
    """Base class for registry index failures."""


class CrateNotFound(RegistryIndexError, LookupError):
    """No index file exists for the requested crate."""

    def __init__(self, name: str) -> None:
        super().__init__(f"crate not found: {name}")
        self.name = name


class IndexIOError(RegistryIndexError):
    """An index file or directory could not be read."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"reading index at {path}: {cause}")
        self.path = path
        self.__cause__ = cause


class IndexParseError(RegistryIndexError):
    """An index line is not a valid version record."""

    def __init__(self, path: Path, line_number: int, cause: Exception) -> None:
        super().__init__(f"parsing {path} line {line_number}: {cause}")
        self.path = path
        self.line_number = line_number
        self.__cause__ = cause


def _load_krate(name: str, path: Path) -> Krate:
    with path.open(encoding="utf-8") as handle:
        versions: list[IndexEntry] = []
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = IndexEntry.model_validate(json.loads(line))
            except (json.JSONDecodeError, ValidationError) as exc:
                raise IndexParseError(path, line_number, exc) from exc
            # Index file names are lower-cased; entry names keep their case.
            if entry.name.lower() != name.lower():
                raise IndexParseError(
                    path,
                    line_number,
                    ValueError(f"entry for {entry.name!r} in the index file of {name!r}"),
                )
            versions.append(entry)
    return Krate(name=name, versions=versions)


class RegistryIndex:
    """A local registry index checkout.

    Parameters
    ----------
    path:
        Index root.  Must be a directory if it exists; a missing root is
        treated as an empty index.
    """

    def __init__(self, path: Path | str) -> None:
        path = Path(path)
        if path.exists() and not path.is_dir():
            raise NotADirectoryConflict(path)
        self._root = path

    @property
    def root(self) -> Path:
        return self._root

    def get(self, name: str) -> Krate:
        """Load every index entry for *name*.

        Raises
        ------
        InvalidName
            For an empty name.
        CrateNotFound
            If the index has no file for the crate, or *name* is not a
            valid crate name.
        IndexIOError, IndexParseError
            If the file cannot be read or parsed.
        """
        path = self._root / addressing.shard(name)
        if not _CRATE_NAME_RE.match(name):
            raise CrateNotFound(name)
        try:
            return _load_krate(name, path)
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as exc:
            raise CrateNotFound(name) from exc
        except UnicodeDecodeError as exc:
            raise IndexParseError(path, 0, exc) from exc
        except OSError as exc:
            raise IndexIOError(path, exc) from exc

    def names(self) -> Iterator[str | RegistryIndexError]:
        """Yield every crate name in the index, in directory order."""
        stack: list[Path] = [self._root]
        while stack:
            directory = stack.pop()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except FileNotFoundError:
                if directory == self._root:
                    return
                yield IndexIOError(directory, FileNotFoundError(directory))
                continue
            except OSError as exc:
                yield IndexIOError(directory, exc)
                continue

            subdirectories: list[Path] = []
            for entry in entries:
                if not _CRATE_NAME_RE.match(entry.name):
                    continue
                if entry.is_dir():
                    subdirectories.append(Path(entry.path))
                else:
                    yield entry.name
            stack.extend(reversed(subdirectories))

    def all(self) -> Iterator[Krate | RegistryIndexError]:
        """Yield every crate in the index; failures are yielded as values."""
        count = 0
        for name in self.names():
            if isinstance(name, RegistryIndexError):
                yield name
                continue
            try:
                yield self.get(name)
                count += 1
            except RegistryIndexError as exc:
                logger.warning("Skipping index entry %s: %s", name, exc)
                yield exc
        logger.info("Read %d crates from index %s", count, self._root)
