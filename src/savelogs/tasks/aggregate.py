from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from ..capabilities import is_available
from ..commands import CommandRunner
from .base import Task, TaskContext, ensure_not_empty


def _banner(command: Sequence[str], title: Optional[str] = None) -> str:
    return f"===== {title or ' '.join(command)} ====="


@dataclass
class Section:
    """
    One sub-command of an aggregated task.

    `followups` are further invocations of the same tool (`lsusb -t` after
    `lsusb`). Each gets its own banner, and they are skipped together with the
    section when the tool is missing.
    """

    command: Sequence[str]
    title: Optional[str] = None
    followups: Sequence[Sequence[str]] = ()

    @property
    def banner(self) -> str:
        return _banner(self.command, self.title)

    @property
    def executable(self) -> str:
        return self.command[0]


class AggregatedTask(Task):
    """
    Concatenate several sub-command outputs into a single file.

    Each section gets a banner header. A missing sub-command tool is noted
    inline as a warning and never fails the task; only `requires` (checked by
    the harness before `collect`) can make the whole task unavailable.
    """

    def __init__(
        self,
        name: str,
        sections: Sequence[Section],
        suffix: str,
        description: str,
        requires: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.sections = list(sections)
        self.suffix = suffix
        self.description = description
        self.requires = tuple(requires)

    def output_paths(self, run) -> List[Path]:
        return [run.log_path(self.suffix)]

    def collect(self, context: TaskContext) -> List[Path]:
        output = context.run.log_path(self.suffix)
        with output.open("w", encoding="utf-8") as handle:
            for section in self.sections:
                handle.write(section.banner + "\n")
                if not is_available(section.executable):
                    handle.write(f"Warning: '{section.executable}' not found\n\n")
                    continue
                _write_command(handle, context.runner, section.command)
                for followup in section.followups:
                    handle.write(_banner(followup) + "\n")
                    _write_command(handle, context.runner, followup)
        return [ensure_not_empty(output)]


def _write_command(handle: TextIO, runner: CommandRunner, command: Sequence[str]) -> None:
    result = runner.run(command)
    if result.stdout:
        handle.write(result.stdout.rstrip("\n") + "\n")
    if result.stderr:
        handle.write(result.stderr.rstrip("\n") + "\n")
    if not result.ok:
        handle.write(f"[{result.describe_failure()}]\n")
    handle.write("\n")
