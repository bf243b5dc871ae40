"""Shared data models for the log capture harness."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TaskStatus(str, Enum):
    """Outcome tracked for every task in a run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CollectedFile(BaseModel):
    """A file written into the run's output directory."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Location of the file inside the output directory.")
    size: Optional[int] = Field(default=None, description="Size in bytes, None when it could not be read.")
    description: str = Field(...)
    written_at: datetime = Field(default_factory=datetime.now)

    def size_label(self) -> str:
        return "unknown" if self.size is None else str(self.size)


class FailureRecord(BaseModel):
    """A task that could not produce its output."""

    model_config = ConfigDict(frozen=True)

    task: str
    reason: str


class RunSummary(BaseModel):
    """Read-only view over a finished run."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    started_at: datetime
    completed_at: datetime
    output_dir: Path
    collected: List[CollectedFile] = Field(default_factory=list)
    failures: List[FailureRecord] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def render(self) -> str:
        """Return the human readable text written to the summary file."""
        lines = [
            f"===== Log capture summary: {self.identifier} =====",
            f"Started:    {self.started_at.strftime(TIMESTAMP_FORMAT)}",
            f"Finished:   {self.completed_at.strftime(TIMESTAMP_FORMAT)}",
            f"Output dir: {self.output_dir}",
            "",
            f"Collected files ({len(self.collected)}):",
        ]
        for entry in self.collected:
            lines.append(f"  - {entry.path.name} ({entry.size_label()} bytes): {entry.description}")
        lines.append("")
        if self.failures:
            lines.append(f"Failed collections ({len(self.failures)}):")
            for failure in self.failures:
                lines.append(f"  - {failure.task}: {failure.reason}")
        else:
            lines.append("All collections succeeded.")
        return "\n".join(lines) + "\n"
