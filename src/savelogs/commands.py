from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .capabilities import is_available


LOGGER = logging.getLogger("savelogs.commands")
FALLBACK_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass
class CommandResult:
    command: List[str]
    return_code: int
    stdout: str
    stderr: str
    skipped: bool = False
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.skipped and self.return_code == 0

    def describe_failure(self) -> str:
        """Short, single line reason suitable for a failure record."""
        label = " ".join(self.command)
        if self.reason == "missing-executable":
            return f"'{self.command[0] if self.command else label}' not found"
        if self.reason == "os-error":
            return f"{label}: {_first_line(self.stderr) or 'OS error'}"
        detail = _first_line(self.stderr)
        message = f"{label} exited with status {self.return_code}"
        return f"{message}: {detail}" if detail else message


class CommandRunner:
    """
    Run diagnostic commands one at a time and report how they ended.

    A missing executable or an OS level error is turned into a result with a
    `reason` instead of an exception, so callers only ever inspect results.
    When *stdout_path* is given, stdout streams straight into that file so
    large dumps (`tree /sys`, `journalctl`) never sit in memory.
    """

    def __init__(self, cwd: Optional[Path] = None) -> None:
        self._cwd = Path(cwd) if cwd else None

    def run(self, command: Iterable[str], stdout_path: Optional[Path] = None) -> CommandResult:
        command_list = list(command)
        if not command_list:
            return CommandResult(command=[], return_code=0, stdout="", stderr="", skipped=True, reason="empty-command")
        if not is_available(command_list[0]):
            LOGGER.debug("Executable %s not found on PATH", command_list[0])
            return CommandResult(
                command=command_list,
                return_code=127,
                stdout="",
                stderr="",
                skipped=True,
                reason="missing-executable",
            )

        LOGGER.debug("$ %s", " ".join(command_list))
        try:
            if stdout_path is not None:
                with Path(stdout_path).open("wb") as handle:
                    completed = subprocess.run(
                        command_list,
                        cwd=self._cwd,
                        stdout=handle,
                        stderr=subprocess.PIPE,
                        env=_command_env(),
                        check=False,
                    )
                stdout = ""
                stderr = completed.stderr.decode("utf-8", errors="replace")
            else:
                completed = subprocess.run(
                    command_list,
                    cwd=self._cwd,
                    capture_output=True,
                    env=_command_env(),
                    check=False,
                )
                stdout = completed.stdout.decode("utf-8", errors="replace")
                stderr = completed.stderr.decode("utf-8", errors="replace")
        except FileNotFoundError as exc:
            return CommandResult(
                command=command_list,
                return_code=127,
                stdout="",
                stderr=str(exc),
                skipped=True,
                reason="missing-executable",
            )
        except OSError as exc:
            return CommandResult(
                command=command_list,
                return_code=getattr(exc, "errno", 1) or 1,
                stdout="",
                stderr=str(exc),
                skipped=False,
                reason="os-error",
            )
        return CommandResult(
            command=command_list,
            return_code=completed.returncode,
            stdout=stdout,
            stderr=stderr,
            skipped=False,
            reason=None,
        )


def _command_env() -> dict:
    env = os.environ.copy()
    if not env.get("PATH"):
        env["PATH"] = FALLBACK_PATH
    return env


def _first_line(text: str) -> str:
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()[:200]
    return ""
