from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from savelogs.config import CollectorConfig, HostPaths


FAKE_TOOLS = [
    "dmesg",
    "lsmod",
    "lspci",
    "numactl",
    "nvidia-smi",
    "dtc",
    "ls",
    "journalctl",
    "tree",
    "fastfetch",
    "lshw",
    "lscpu",
    "lsblk",
    "lsmem",
    "lsusb",
]


def make_tool(bin_dir: Path, name: str, body: str = "") -> Path:
    """Write an executable shell script standing in for *name*."""
    path = bin_dir / name
    script = body or f'echo "fake {name} output $@"'
    path.write_text(f"#!/bin/sh\n{script}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def remove_tool(bin_dir: Path, name: str) -> None:
    (bin_dir / name).unlink()


def write_config_file(config: CollectorConfig, path: Path) -> Path:
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def fake_host(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """A fabricated host where every diagnostic command exists and succeeds."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for tool in FAKE_TOOLS:
        make_tool(bin_dir, tool)
    monkeypatch.setenv("PATH", str(bin_dir))

    root = tmp_path / "host"
    proc = root / "proc"
    sys_dir = root / "sys"
    boot = root / "boot"
    etc = root / "etc"
    var_log = root / "var" / "log"
    debugfs = sys_dir / "kernel" / "debug"
    for directory in (
        proc,
        sys_dir / "firmware" / "devicetree" / "base",
        sys_dir / "bus" / "platform" / "devices",
        debugfs / "tegra-host1x",
        boot,
        etc,
        var_log,
    ):
        directory.mkdir(parents=True, exist_ok=True)

    (proc / "iomem").write_text("00000000-00000fff : Reserved\n", encoding="utf-8")
    (proc / "interrupts").write_text("           CPU0\n  0:         42   IO-APIC   timer\n", encoding="utf-8")
    (proc / "modules").write_text("zram 32768 2 - Live\nahci 45056 1 - Live\n", encoding="utf-8")
    (sys_dir / "firmware" / "fdt").write_bytes(b"\xd0\x0d\xfe\xed\x00\x00\x01\x00")
    (debugfs / "tegra-host1x" / "devices").write_text("host1x devices\n", encoding="utf-8")
    (debugfs / "tegra-host1x" / "status_all").write_text("host1x status\n", encoding="utf-8")
    (boot / "config-6.1.0-test").write_text("CONFIG_SMP=y\n", encoding="utf-8")
    (var_log / "Xorg.0.log").write_text("[ 0.000] X.Org X Server\n", encoding="utf-8")
    history = tmp_path / "bash_history"
    history.write_text("ls -la\nsudo save-logs tray17\n", encoding="utf-8")

    config = CollectorConfig(
        output_root=tmp_path / "out",
        archive=False,
        auto_install=False,
        history_file=history,
        host=HostPaths(proc=proc, sys=sys_dir, boot=boot, etc=etc, var_log=var_log, debugfs=debugfs),
    )
    return SimpleNamespace(bin_dir=bin_dir, root=root, config=config, tmp_path=tmp_path)
