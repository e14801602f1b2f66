"""Root of the cratevault exception hierarchy.

Each component defines its own closed family of errors beneath
``CrateVaultError`` (``AddressError``, ``ScanError``, ``PopulateError``,
``RegistryIndexError``) so callers can catch at whichever granularity
they need.
"""

from __future__ import annotations


class CrateVaultError(Exception):
    """Base class for every error raised or yielded by cratevault."""
