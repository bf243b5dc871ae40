from pathlib import Path
from typing import List

from conftest import make_tool
from savelogs.commands import CommandResult
from savelogs.preflight import (
    AptInstaller,
    NullInstaller,
    PackageInstaller,
    detect_installer,
    run_preflight,
)


class RecordingRunner:
    def __init__(self, return_codes=None):
        self.commands: List[List[str]] = []
        self._return_codes = return_codes or {}

    def run(self, command, stdout_path=None):
        command = list(command)
        self.commands.append(command)
        code = self._return_codes.get(" ".join(command), 0)
        return CommandResult(command=command, return_code=code, stdout="", stderr="E: boom" if code else "")


class ScriptInstaller(PackageInstaller):
    """Installs a package by dropping a fake executable on PATH."""

    name = "fake"

    def __init__(self, bin_dir: Path, installable=()):
        self.bin_dir = bin_dir
        self.installable = set(installable)
        self.attempts: List[str] = []

    def detect(self) -> bool:
        return True

    def install(self, package: str) -> bool:
        self.attempts.append(package)
        if package not in self.installable:
            return False
        make_tool(self.bin_dir, package)
        return True


def test_apt_installer_updates_once():
    runner = RecordingRunner()
    installer = AptInstaller(runner)

    assert installer.install("tree") is True
    assert installer.install("fastfetch") is True
    assert runner.commands == [
        ["apt-get", "update", "-y"],
        ["apt-get", "install", "-y", "tree"],
        ["apt-get", "install", "-y", "fastfetch"],
    ]


def test_apt_installer_failure_is_not_raised():
    runner = RecordingRunner({"apt-get update -y": 100, "apt-get install -y fastfetch": 100})
    installer = AptInstaller(runner)

    assert installer.install("fastfetch") is False


def test_detect_installer(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    assert isinstance(detect_installer(), NullInstaller)

    make_tool(bin_dir, "apt-get")
    assert isinstance(detect_installer(), AptInstaller)


def test_null_installer_never_installs():
    assert NullInstaller().install("tree") is False


def test_preflight_skips_present_tools(fake_host):
    installer = ScriptInstaller(fake_host.bin_dir)

    report = run_preflight(installer)

    assert installer.attempts == []
    assert report.available == ["tree", "fastfetch"]
    assert report.unavailable == []


def test_preflight_falls_back_to_neofetch(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    installer = ScriptInstaller(bin_dir, installable={"tree", "neofetch"})

    report = run_preflight(installer)

    assert installer.attempts == ["tree", "fastfetch", "neofetch"]
    assert report.available == ["tree", "neofetch"]


def test_preflight_swallows_installer_errors(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))

    class BrokenInstaller(PackageInstaller):
        def install(self, package):
            raise RuntimeError("dpkg lock held")

    report = run_preflight(BrokenInstaller())

    assert report.available == []
    assert report.unavailable == [("tree",), ("fastfetch", "neofetch")]
