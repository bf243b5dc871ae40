"""Tasks whose sources depend on the invoking user or on what the host offers."""

from __future__ import annotations

import pwd
import shutil
from pathlib import Path
from typing import List, Mapping, Optional

from ..capabilities import first_available
from ..errors import TaskFailure
from ..run import Run
from .base import Task, TaskContext, ensure_not_empty


class EnvironmentTask(Task):
    name = "env"
    description = "Process environment"

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path("env.txt")]

    def collect(self, context: TaskContext) -> List[Path]:
        output = context.run.log_path("env.txt")
        output.write_text(
            "".join(f"{key}={value}\n" for key, value in context.environ.items()),
            encoding="utf-8",
        )
        return [ensure_not_empty(output)]


class ShellHistoryTask(Task):
    """Copy the shell history of the user who invoked the run (through sudo if needed)."""

    name = "bash_history"
    description = "Shell history of the invoking user"

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path("bash_history.txt")]

    def collect(self, context: TaskContext) -> List[Path]:
        source = resolve_history_file(context.environ, context.config.history_file)
        output = context.run.log_path("bash_history.txt")
        try:
            shutil.copyfile(source, output)
        except OSError as exc:
            raise TaskFailure(f"cannot read {source}: {exc.strerror or exc}") from exc
        return [ensure_not_empty(output)]


def resolve_history_file(environ: Mapping[str, str], override: Optional[Path] = None) -> Path:
    if override:
        return Path(override)
    if environ.get("HISTFILE"):
        return Path(environ["HISTFILE"])
    sudo_user = environ.get("SUDO_USER")
    if sudo_user:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir) / ".bash_history"
        except KeyError:
            pass
    home = environ.get("HOME")
    return (Path(home) if home else Path.home()) / ".bash_history"


class KernelConfigTask(Task):
    """Copy every `config*` file found under the boot directory."""

    name = "kernel_config"
    description = "Kernel boot configuration"

    def __init__(self, boot_dir: Path) -> None:
        self.boot_dir = Path(boot_dir)

    def _sources(self) -> List[Path]:
        try:
            return sorted(path for path in self.boot_dir.rglob("config*") if path.is_file())
        except OSError:
            return []

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path(f"{source.name}.txt") for source in self._sources()]

    def describe(self, path: Path) -> str:
        stem = Path(path).stem
        return f"{self.description} ({stem[stem.rfind('_config') + 1:]})"

    def collect(self, context: TaskContext) -> List[Path]:
        sources = self._sources()
        if not sources:
            raise TaskFailure(f"no config* files under {self.boot_dir}")
        written: List[Path] = []
        for source in sources:
            output = context.run.log_path(f"{source.name}.txt")
            try:
                shutil.copyfile(source, output)
            except OSError as exc:
                raise TaskFailure(f"cannot read {source}: {exc.strerror or exc}") from exc
            written.append(ensure_not_empty(output))
        return written


class SystemSummaryTask(Task):
    """`fastfetch` system summary, falling back to `neofetch --stdout`."""

    name = "fastfetch"
    description = "System summary (fastfetch/neofetch)"
    requires = ("fastfetch", "neofetch")

    def unavailable_reason(self) -> Optional[str]:
        if first_available(self.requires) is None:
            return "neither 'fastfetch' nor 'neofetch' found"
        return None

    def output_paths(self, run: Run) -> List[Path]:
        return [run.log_path("fastfetch.txt")]

    def collect(self, context: TaskContext) -> List[Path]:
        tool = first_available(self.requires)
        if tool == "fastfetch":
            banner = "===== fastfetch ====="
            result = context.runner.run(["fastfetch", "--pipe"])
            if not result.ok:
                result = context.runner.run(["fastfetch"])
        elif tool == "neofetch":
            banner = "===== neofetch (--stdout) ====="
            result = context.runner.run(["neofetch", "--stdout"])
        else:
            raise TaskFailure("neither 'fastfetch' nor 'neofetch' found")

        if not result.ok:
            raise TaskFailure(result.describe_failure())
        output = context.run.log_path("fastfetch.txt")
        output.write_text(f"{banner}\n{result.stdout}{result.stderr}", encoding="utf-8")
        return [output]
