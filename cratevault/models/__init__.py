"""cratevault data models — Pydantic v2, frozen where they are records."""

from cratevault.models.crates import CrateVersion, Manifest, ManifestPackage
from cratevault.models.index import IndexEntry, Krate
from cratevault.models.reports import PopulateFailure, PopulateReport

__all__ = [
    # crates
    "CrateVersion",
    "Manifest",
    "ManifestPackage",
    # index
    "IndexEntry",
    "Krate",
    # reports
    "PopulateFailure",
    "PopulateReport",
]
