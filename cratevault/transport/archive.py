"""Gzipped tarball extraction for ``.crate`` archives."""

from __future__ import annotations

import logging
import tarfile
import zlib
from pathlib import Path
from typing import BinaryIO

from cratevault.transport.base import ExtractionError

logger = logging.getLogger(__name__)


class TarGzExtractor:
    """Unpacks a gzip-compressed tar stream into a directory.

    The archive is read in streaming mode (``r|gz``), so the input does not
    need to be seekable.  Members go through tarfile's ``data`` filter,
    which makes absolute names relative and rejects links escaping the
    destination as well as device files.  Existing files in the
    destination are overwritten.
    """

    def extract(self, stream: BinaryIO, destination: Path) -> None:
        destination = Path(destination)
        try:
            with tarfile.open(fileobj=stream, mode="r|gz") as archive:
                archive.extractall(destination, filter="data")
        except (tarfile.TarError, zlib.error, EOFError, OSError) as exc:
            raise ExtractionError(f"unpacking archive into {destination}: {exc}") from exc

        logger.debug("Extracted archive into %s", destination)
