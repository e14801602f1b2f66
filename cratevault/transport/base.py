"""Fetcher and extractor protocols plus the transfer error family."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from cratevault.errors import CrateVaultError


class TransferError(CrateVaultError):
    """Base class for failures while fetching or unpacking an artifact."""


class TransportError(TransferError):
    """The artifact bytes could not be fetched."""


class ExtractionError(TransferError):
    """The artifact bytes could not be decoded or unpacked."""


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for artifact download backends.

    ``fetch`` returns a binary stream; the caller closes it.  Failures
    should surface as ``TransportError``.
    """

    def fetch(self, name: str, version: str) -> BinaryIO:
        ...


@runtime_checkable
class ArchiveExtractor(Protocol):
    """Protocol for archive unpacking backends.

    ``extract`` unpacks *stream* into *destination*, overwriting existing
    entries.  Failures should surface as ``ExtractionError``.
    """

    def extract(self, stream: BinaryIO, destination: Path) -> None:
        ...
