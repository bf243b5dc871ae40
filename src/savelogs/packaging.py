from __future__ import annotations

import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOGGER = logging.getLogger("savelogs.packaging")


@dataclass
class ArchiveResult:
    """Metadata describing the archive produced for a run."""

    status: str
    output_path: Path
    size: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class LogArchiver:
    """
    Produce `<identifier>_logs.tar.gz` next to the run's output directory.

    The tarball is built under a `.partial` name and renamed into place once
    complete. On failure nothing named `<identifier>_logs.tar.gz` is left
    behind, including an archive from an earlier run with the same identifier.
    """

    def archive_path(self, identifier: str, output_dir: Path) -> Path:
        return Path(output_dir).resolve().parent / f"{identifier}_logs.tar.gz"

    def package(self, identifier: str, output_dir: Path) -> ArchiveResult:
        output_dir = Path(output_dir).resolve()
        archive_path = self.archive_path(identifier, output_dir)
        partial_path = archive_path.with_name(archive_path.name + ".partial")
        LOGGER.info("Creating archive %s", archive_path)
        try:
            with tarfile.open(partial_path, "w:gz") as archive:
                archive.add(output_dir, arcname=output_dir.name)
            partial_path.replace(archive_path)
            size = archive_path.stat().st_size
        except (OSError, tarfile.TarError) as exc:
            LOGGER.error("Failed to create archive %s: %s", archive_path, exc)
            _remove(partial_path)
            _remove(archive_path)
            return ArchiveResult(status="failed", output_path=archive_path, error=str(exc))
        LOGGER.info("Archive created: %s (%d bytes)", archive_path, size)
        return ArchiveResult(status="succeeded", output_path=archive_path, size=size)


def _remove(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.warning("Could not remove %s: %s", path, exc)
