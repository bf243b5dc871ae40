"""Exception hierarchy for the collection harness."""

from __future__ import annotations


class CollectorError(Exception):
    """Base class for every error raised by savelogs."""


class FatalError(CollectorError):
    """Aborts the run before any collection happens."""


class MissingIdentifierError(FatalError):
    def __init__(self) -> None:
        super().__init__("No identifier argument provided.")


class InvalidIdentifierError(FatalError):
    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"Invalid identifier {identifier!r}; use letters, digits, '.', '_' or '-'."
        )
        self.identifier = identifier


class PrivilegeError(FatalError):
    def __init__(self) -> None:
        super().__init__("This command must be run as root to capture full system logs.")


class OutputDirectoryError(FatalError):
    def __init__(self, path, reason: str) -> None:
        super().__init__(f"Could not create directory {path}: {reason}")
        self.path = path
        self.reason = reason


class TaskFailure(CollectorError):
    """Raised inside a task to record a failure and move on to the next task."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ConfigError(FatalError):
    def __init__(self, path, reason: str) -> None:
        super().__init__(f"Could not load config {path}: {reason}")
        self.path = path
        self.reason = reason
