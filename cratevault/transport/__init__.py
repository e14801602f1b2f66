"""Collaborators that get crate bytes onto disk.

A ``Fetcher`` turns ``(name, version)`` into a readable byte stream and an
``ArchiveExtractor`` unpacks such a stream into a directory.  ``Corpus``
depends only on these protocols; ``HttpFetcher`` and ``TarGzExtractor``
are the default implementations.
"""

from cratevault.transport.archive import TarGzExtractor
from cratevault.transport.base import (
    ArchiveExtractor,
    ExtractionError,
    Fetcher,
    TransferError,
    TransportError,
)
from cratevault.transport.http import HttpFetcher

__all__ = [
    "ArchiveExtractor",
    "ExtractionError",
    "Fetcher",
    "HttpFetcher",
    "TarGzExtractor",
    "TransferError",
    "TransportError",
]
