from __future__ import annotations

from pathlib import Path
from typing import List

from . import __version__
from .run import Run
from .schemas import TIMESTAMP_FORMAT, CollectedFile


class ManifestWriter:
    """
    Append-only manifest of every file collected during a run.

    The file is truncated when the writer opens it, so a re-run with the same
    identifier starts from a fresh header. Entries are appended as files are
    collected; `finalize` appends the manifest's own entry, always last.
    """

    def __init__(self, run: Run) -> None:
        self._run = run
        self.path = run.log_path("manifest.txt")
        self._entries = 0

    @property
    def entries(self) -> int:
        return self._entries

    def header_lines(self) -> List[str]:
        return [
            f"# savelogs {__version__} manifest for run {self._run.identifier}",
            f"# Started: {self._run.started_at.strftime(TIMESTAMP_FORMAT)}",
            f"# Output dir: {self._run.output_dir}",
            "# Format: <timestamp> | <path> | <size> bytes | <description>",
        ]

    def open(self) -> "ManifestWriter":
        self.path.write_text("\n".join(self.header_lines()) + "\n", encoding="utf-8")
        self._entries = 0
        return self

    def append(self, entry: CollectedFile) -> None:
        line = " | ".join(
            [
                entry.written_at.strftime(TIMESTAMP_FORMAT),
                str(self._run.relative(entry.path)),
                f"{entry.size_label()} bytes",
                entry.description,
            ]
        )
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
        self._entries += 1

    def finalize(self) -> CollectedFile:
        """Record the manifest itself as the last entry and return that entry."""
        entry = self._run.record_file(self.path, "Manifest of collected files")
        self.append(entry)
        return entry


def read_entries(path: Path) -> List[str]:
    """Return manifest entry lines, header comments excluded."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line and not line.startswith("#")]
