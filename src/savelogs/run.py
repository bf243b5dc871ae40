from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .errors import InvalidIdentifierError, MissingIdentifierError
from .schemas import CollectedFile, FailureRecord, RunSummary, TaskStatus


IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_identifier(identifier: Optional[str]) -> str:
    """Return *identifier* unchanged or raise when it cannot name a directory."""
    if identifier is None or not identifier.strip():
        raise MissingIdentifierError()
    if identifier in {".", ".."} or not IDENTIFIER_PATTERN.match(identifier):
        raise InvalidIdentifierError(identifier)
    return identifier


@dataclass
class Run:
    """Mutable accumulator threaded through every task of a single invocation."""

    identifier: str
    output_dir: Path
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    collected: List[CollectedFile] = field(default_factory=list)
    failures: List[FailureRecord] = field(default_factory=list)
    outcomes: Dict[str, TaskStatus] = field(default_factory=dict)

    def log_path(self, suffix: str) -> Path:
        """Return the `logs_<identifier>_<suffix>` path inside the output directory."""
        return self.output_dir / f"logs_{self.identifier}_{suffix}"

    def record_file(self, path: Path, description: str) -> CollectedFile:
        try:
            size: Optional[int] = Path(path).stat().st_size
        except OSError:
            size = None
        entry = CollectedFile(path=Path(path), size=size, description=description)
        self.collected.append(entry)
        return entry

    def record_failure(self, task: str, reason: str) -> FailureRecord:
        record = FailureRecord(task=task, reason=reason)
        self.failures.append(record)
        self.outcomes[task] = TaskStatus.FAILED
        return record

    def mark_succeeded(self, task: str) -> None:
        self.outcomes[task] = TaskStatus.SUCCEEDED

    def relative(self, path: Path) -> Path:
        try:
            return Path(path).relative_to(self.output_dir)
        except ValueError:
            return Path(path)

    def finish(self) -> RunSummary:
        """Stamp the completion time and return the summary view."""
        if self.completed_at is None:
            self.completed_at = datetime.now()
        return RunSummary(
            identifier=self.identifier,
            started_at=self.started_at,
            completed_at=self.completed_at,
            output_dir=self.output_dir,
            collected=list(self.collected),
            failures=list(self.failures),
        )
