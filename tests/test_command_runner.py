import subprocess
from pathlib import Path

from conftest import make_tool
from savelogs.commands import CommandRunner


def test_command_runner_missing_executable(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    runner = CommandRunner(tmp_path)

    result = runner.run(["lspci", "-tv"])

    assert result.skipped is True
    assert result.reason == "missing-executable"
    assert result.return_code == 127
    assert result.describe_failure() == "'lspci' not found"


def test_command_runner_file_not_found_from_subprocess(monkeypatch, tmp_path: Path):
    """
    The executable vanishes between the PATH lookup and the exec call; the
    runner reports it instead of raising FileNotFoundError to the caller.
    """
    runner = CommandRunner(tmp_path)
    monkeypatch.setattr("savelogs.capabilities.which", lambda exe: str(tmp_path / "fake-dmesg"))

    def _raise_file_not_found(*_, **__):
        raise FileNotFoundError("No such file or directory: 'dmesg'")

    monkeypatch.setattr(subprocess, "run", _raise_file_not_found)

    result = runner.run(["dmesg"])

    assert result.skipped is True
    assert result.reason == "missing-executable"
    assert result.return_code == 127
    assert result.ok is False


def test_command_runner_os_error(monkeypatch, tmp_path: Path):
    runner = CommandRunner(tmp_path)
    monkeypatch.setattr("savelogs.capabilities.which", lambda exe: "/usr/bin/dmesg")

    def _raise_permission(*_, **__):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(subprocess, "run", _raise_permission)

    result = runner.run(["dmesg"])

    assert result.reason == "os-error"
    assert result.return_code == 13
    assert "Permission denied" in result.describe_failure()


def test_command_runner_captures_stdout(monkeypatch, tmp_path: Path):
    monkeypatch.setattr("savelogs.capabilities.which", lambda exe: "/usr/bin/lscpu")
    completed = subprocess.CompletedProcess(args=["lscpu"], returncode=0, stdout=b"Architecture: x86_64\n", stderr=b"")
    monkeypatch.setattr(subprocess, "run", lambda *args, **kwargs: completed)

    result = CommandRunner(tmp_path).run(["lscpu"])

    assert result.ok is True
    assert result.stdout.strip() == "Architecture: x86_64"


def test_command_runner_streams_to_file(tmp_path: Path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    make_tool(bin_dir, "journalctl", body='echo "boot log"; echo "warning" >&2')
    monkeypatch.setenv("PATH", str(bin_dir))
    output = tmp_path / "journal.txt"

    result = CommandRunner(tmp_path).run(["journalctl", "-b0"], stdout_path=output)

    assert result.ok is True
    assert result.stdout == ""
    assert result.stderr.strip() == "warning"
    assert output.read_text(encoding="utf-8") == "boot log\n"


def test_command_runner_nonzero_exit(tmp_path: Path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    make_tool(bin_dir, "numactl", body='echo "No NUMA available on this system" >&2; exit 1')
    monkeypatch.setenv("PATH", str(bin_dir))

    result = CommandRunner(tmp_path).run(["numactl", "--hardware"])

    assert result.ok is False
    assert result.skipped is False
    assert result.describe_failure() == (
        "numactl --hardware exited with status 1: No NUMA available on this system"
    )
