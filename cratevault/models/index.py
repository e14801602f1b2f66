"""Registry index models.

Each index file holds one JSON object per line, one line per published
version of a crate.  Only the fields the vault needs are modelled; the
rest are ignored.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Index data becomes vault path components; anything that could name a
# different directory (separators, NUL, "..") is rejected at parse time.
CRATE_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"
VERSION_PATTERN = r"^[0-9A-Za-z+-]+(\.[0-9A-Za-z+-]+)*$"


class IndexEntry(BaseModel):
    """A single published version, as recorded in the registry index."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = Field(pattern=CRATE_NAME_PATTERN)
    version: str = Field(alias="vers", pattern=VERSION_PATTERN)
    cksum: str = ""
    yanked: bool = False
    features: dict[str, list[str]] = Field(default_factory=dict)
    deps: list[dict[str, Any]] = Field(default_factory=list)


class Krate(BaseModel):
    """All index entries for one crate, in index (publication) order."""

    model_config = ConfigDict(frozen=True)

    name: str
    versions: list[IndexEntry] = Field(default_factory=list)

    def iter_versions(self, *, include_yanked: bool = True) -> Iterator[IndexEntry]:
        """Yield the crate's versions, optionally skipping yanked ones."""
        for entry in self.versions:
            if entry.yanked and not include_yanked:
                continue
            yield entry
