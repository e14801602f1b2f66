"""cratevault: a local, deterministically addressed mirror of registry crates.

The vault stores every ``(name, version)`` under a sharded directory path
and rebuilds its index by crawling the stored trees for ``Cargo.toml``
manifests.  Population is idempotent and crash-safe: a crate directory
that exists is complete.
"""

__version__ = "0.2.0"
__description__ = "Deterministic on-disk vault of registry crate artifacts"

from cratevault.core.corpus import Corpus
from cratevault.core.vault import Vault
from cratevault.models.crates import CrateVersion

__all__ = ["Corpus", "Vault", "CrateVersion", "__version__"]
