"""Task descriptors and the context every task receives."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from ..capabilities import missing_tools
from ..commands import CommandRunner
from ..config import CollectorConfig
from ..errors import TaskFailure
from ..run import Run


LOGGER = logging.getLogger("savelogs.tasks")


@dataclass
class TaskContext:
    """State handed to each task; the run is the only thing tasks mutate."""

    run: Run
    config: CollectorConfig
    runner: CommandRunner
    environ: Mapping[str, str] = field(default_factory=dict)


class Task:
    """
    One independent collection unit.

    Subclasses implement `collect`, returning the files they wrote, or raise
    `TaskFailure` with a short reason. Anything a task leaves behind after a
    failure is removed by the harness through `discard`.
    """

    name: str
    description: str
    requires: Tuple[str, ...] = ()

    def unavailable_reason(self) -> Optional[str]:
        missing = missing_tools(self.requires)
        if missing:
            return f"'{missing[0]}' not found"
        return None

    def output_paths(self, run: Run) -> List[Path]:
        return []

    def describe(self, path: Path) -> str:
        return self.description

    def collect(self, context: TaskContext) -> List[Path]:  # pragma: no cover - documentation method
        raise NotImplementedError

    def discard(self, run: Run) -> None:
        for path in self.output_paths(run):
            path.unlink(missing_ok=True)


def ensure_not_empty(path: Path) -> Path:
    if path.stat().st_size == 0:
        raise TaskFailure(f"{path.name} is empty")
    return path


class CommandTask(Task):
    """Run one command and store its stdout in `logs_<id>_<suffix>`."""

    def __init__(
        self,
        name: str,
        command: Sequence[str],
        suffix: str,
        description: str,
        sort_lines: bool = False,
        requires: Optional[Sequence[str]] = None,
    ) -> None:
        self.name = name
        self.command = [str(part) for part in command]
        self.suffix = suffix
        self.description = description
        self.sort_lines = sort_lines
        self.requires = tuple(requires) if requires is not None else (self.command[0],)

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path(self.suffix)]

    def collect(self, context: TaskContext) -> List[Path]:
        output = context.run.log_path(self.suffix)
        if self.sort_lines:
            result = context.runner.run(self.command)
            if result.ok:
                output.write_text(_sorted_text(result.stdout), encoding="utf-8")
        else:
            result = context.runner.run(self.command, stdout_path=output)
        if not result.ok:
            raise TaskFailure(result.describe_failure())
        return [ensure_not_empty(output)]


class FileTask(Task):
    """
    Copy one or more source files into `logs_<id>_<suffix>`.

    With several sources the contents are concatenated; unreadable sources are
    skipped as long as at least one could be read.
    """

    def __init__(
        self,
        name: str,
        sources: Sequence[Path],
        suffix: str,
        description: str,
        sort_lines: bool = False,
    ) -> None:
        self.name = name
        self.sources = [Path(source) for source in sources]
        self.suffix = suffix
        self.description = description
        self.sort_lines = sort_lines

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path(self.suffix)]

    def collect(self, context: TaskContext) -> List[Path]:
        chunks: List[bytes] = []
        errors: List[str] = []
        for source in self.sources:
            try:
                chunks.append(source.read_bytes())
            except OSError as exc:
                errors.append(f"cannot read {source}: {exc.strerror or exc}")
                LOGGER.debug("Skipping unreadable source %s: %s", source, exc)
        if not chunks:
            raise TaskFailure("; ".join(errors) or "no sources configured")

        payload = b"".join(chunks)
        if self.sort_lines:
            payload = _sorted_text(payload.decode("utf-8", errors="replace")).encode("utf-8")
        output = context.run.log_path(self.suffix)
        output.write_bytes(payload)
        return [ensure_not_empty(output)]


def _sorted_text(text: str) -> str:
    lines = sorted(line for line in text.splitlines())
    return "\n".join(lines) + ("\n" if lines else "")
