from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .commands import CommandRunner
from .config import CollectorConfig
from .errors import OutputDirectoryError, TaskFailure
from .manifest import ManifestWriter
from .packaging import ArchiveResult, LogArchiver
from .preflight import PackageInstaller, detect_installer, run_preflight
from .run import Run, validate_identifier
from .schemas import RunSummary
from .tasks import Task, TaskContext, TaskRegistry, build_task_catalog


LOGGER = logging.getLogger("savelogs.harness")


@dataclass
class RunResult:
    """Outcome of a full collection run."""

    run: Run
    status: str
    summary: RunSummary
    summary_text: str
    summary_path: Path
    manifest_path: Path
    archive: Optional[ArchiveResult]


def is_privileged() -> bool:
    return os.geteuid() == 0


def prepare_output_dir(root: Path, identifier: str) -> Path:
    """Create `<root>/<identifier>` or raise `OutputDirectoryError`."""
    output_dir = (Path(root) / identifier).resolve()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(output_dir, exc.strerror or str(exc)) from exc
    if not os.access(output_dir, os.W_OK | os.X_OK):
        raise OutputDirectoryError(output_dir, "directory is not writable")
    return output_dir


class LogCollector:
    """Coordinate preflight, task execution, manifest, summary, and archival."""

    def __init__(
        self,
        config: CollectorConfig,
        tasks: Optional[TaskRegistry] = None,
        installer: Optional[PackageInstaller] = None,
        archiver: Optional[LogArchiver] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._config = config
        self._tasks = tasks
        self._installer = installer
        self._archiver = archiver or LogArchiver()
        self._environ = dict(os.environ if environ is None else environ)
        self._logger = LOGGER

    def execute(self, identifier: str) -> RunResult:
        identifier = validate_identifier(identifier)
        output_dir = prepare_output_dir(self._config.output_root, identifier)
        run = Run(identifier=identifier, output_dir=output_dir)
        self._logger.info("--- Starting log capture for: %s ---", identifier)
        self._logger.info("Saving logs to %s", output_dir)

        runner = CommandRunner(cwd=output_dir)
        if self._config.auto_install:
            run_preflight(self._installer or detect_installer(runner))
        else:
            self._logger.debug("Auto-install disabled; skipping dependency preflight")

        tasks = self._tasks if self._tasks is not None else build_task_catalog(self._config)
        context = TaskContext(run=run, config=self._config, runner=runner, environ=self._environ)
        manifest = ManifestWriter(run).open()

        for task in tasks:
            self._run_task(task, context, manifest)

        manifest.finalize()
        summary = run.finish()
        summary_text = summary.render()
        summary_path = run.log_path("summary.txt")
        summary_path.write_text(summary_text, encoding="utf-8")

        archive: Optional[ArchiveResult] = None
        if self._config.archive:
            archive = self._archiver.package(identifier, output_dir)

        status = "succeeded" if summary.succeeded else "partial-success"
        self._logger.info("--- Log capture for %s finished with status %s ---", identifier, status)
        return RunResult(
            run=run,
            status=status,
            summary=summary,
            summary_text=summary_text,
            summary_path=summary_path,
            manifest_path=manifest.path,
            archive=archive,
        )

    def _run_task(self, task: Task, context: TaskContext, manifest: ManifestWriter) -> None:
        run = context.run
        self._logger.info("Collecting %s...", task.name)
        reason = task.unavailable_reason()
        if reason:
            self._logger.warning("Skipping %s: %s", task.name, reason)
            run.record_failure(task.name, reason)
            return

        try:
            paths = task.collect(context)
        except TaskFailure as exc:
            self._fail(task, run, exc.reason)
            return
        except OSError as exc:
            self._fail(task, run, f"{exc.strerror or exc}")
            return
        except Exception as exc:  # pragma: no cover - unexpected task bug, surfaced via logging
            self._logger.exception("%s task crashed: %s", task.name, exc)
            self._fail(task, run, f"unexpected error: {exc}")
            return

        for path in paths:
            manifest.append(run.record_file(path, task.describe(path)))
        run.mark_succeeded(task.name)

    def _fail(self, task: Task, run: Run, reason: str) -> None:
        self._logger.warning("%s failed: %s", task.name, reason)
        try:
            task.discard(run)
        except OSError as exc:
            self._logger.warning("Could not remove partial output of %s: %s", task.name, exc)
        run.record_failure(task.name, reason)
