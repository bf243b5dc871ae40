from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError


@dataclass
class HostPaths:
    """Locations of the kernel/hardware pseudo filesystems read during a run."""

    proc: Path = Path("/proc")
    sys: Path = Path("/sys")
    boot: Path = Path("/boot")
    etc: Path = Path("/etc")
    var_log: Path = Path("/var/log")
    debugfs: Path = Path("/sys/kernel/debug")

    def to_dict(self) -> Dict[str, str]:
        return {key: str(value) for key, value in asdict(self).items()}


@dataclass
class CollectorConfig:
    """Top level configuration consumed by the harness and the task catalog."""

    output_root: Path = field(default_factory=Path.cwd)
    archive: bool = True
    auto_install: bool = True
    history_file: Optional[Path] = None
    host: HostPaths = field(default_factory=HostPaths)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON serialisable copy of the config."""
        return {
            "output_root": str(self.output_root),
            "archive": self.archive,
            "auto_install": self.auto_install,
            "history_file": str(self.history_file) if self.history_file else None,
            "host": self.host.to_dict(),
        }


def load_config(path: Optional[Path]) -> CollectorConfig:
    """
    Load configuration from *path* if provided, otherwise use the defaults.

    The configuration file is expected to be JSON. Unspecified fields fall back
    to the defaults baked into the dataclasses above; unknown keys are ignored.
    """
    config = CollectorConfig()
    if path is None:
        return config

    try:
        with Path(path).expanduser().open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    except OSError as exc:
        raise ConfigError(path, exc.strerror or str(exc)) from exc
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a JSON object")

    _apply_config_updates(config, data)
    return config


def _apply_config_updates(config: CollectorConfig, payload: Dict[str, Any]) -> None:
    """Update *config* in-place using keys from the *payload* dict."""
    if "output_root" in payload:
        config.output_root = Path(payload["output_root"]).expanduser()
    if "archive" in payload:
        config.archive = bool(payload["archive"])
    if "auto_install" in payload:
        config.auto_install = bool(payload["auto_install"])
    if payload.get("history_file"):
        config.history_file = Path(payload["history_file"]).expanduser()

    if "host" in payload:
        for key, value in payload["host"].items():
            if hasattr(config.host, key):
                setattr(config.host, key, Path(value))
