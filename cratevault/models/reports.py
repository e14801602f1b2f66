"""Summary models produced by a populate run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class PopulateFailure(BaseModel):
    """A single ``(name, version)`` that could not be populated."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    error_type: str
    message: str
    cleaned_up: bool = False


class PopulateReport(BaseModel):
    """Outcome of populating a batch of crate versions."""

    populated: list[Path] = Field(default_factory=list)
    failures: list[PopulateFailure] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.populated) + len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures
