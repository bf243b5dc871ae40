from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Iterator, List

from ..config import CollectorConfig
from .aggregate import AggregatedTask, Section
from .base import CommandTask, FileTask, Task, TaskContext
from .host import EnvironmentTask, KernelConfigTask, ShellHistoryTask, SystemSummaryTask


class TaskRegistry:
    """Ordered task catalog; registering an existing name replaces that definition in place."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: "OrderedDict[str, Task]" = OrderedDict()
        for task in tasks:
            self.register(task)

    def register(self, task: Task) -> None:
        self._tasks[task.name] = task

    def names(self) -> List[str]:
        return list(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks


GPU_SECTIONS = [
    Section(["nvidia-smi"]),
    Section(["nvidia-smi", "--version"]),
    Section(["nvidia-smi", "topo", "-m"]),
    Section(["nvidia-smi", "-q"]),
    Section(["nvidia-smi", "conf-compute", "-f"]),
    Section(["nvidia-smi", "conf-compute", "-q"]),
    Section(["nvidia-smi", "conf-compute", "-grs"]),
    Section(["nvidia-smi", "conf-compute", "-e"]),
]

HWTOOLS_SECTIONS = [
    Section(["lshw"]),
    Section(["lscpu"]),
    Section(["lsblk", "-a", "-f"], title="lsblk"),
    Section(["lsmem"]),
    Section(["lsusb"], followups=[["lsusb", "-t"]]),
]


def build_task_catalog(config: CollectorConfig) -> TaskRegistry:
    """Factory returning the ordered collection tasks for *config*'s host layout."""
    host = config.host
    tegra = host.debugfs / "tegra-host1x"
    return TaskRegistry(
        [
            CommandTask("dmesg", ["dmesg"], "dmesg.txt", "Kernel ring buffer"),
            FileTask("iomem", [host.proc / "iomem"], "iomem.txt", "Physical memory map (/proc/iomem)"),
            FileTask("interrupts", [host.proc / "interrupts"], "interrupts.txt", "Interrupt counters (/proc/interrupts)"),
            FileTask("modules", [host.proc / "modules"], "modules.txt", "Loaded modules (/proc/modules, sorted)", sort_lines=True),
            CommandTask("lsmod", ["lsmod"], "lsmod.txt", "Loaded modules (lsmod, sorted)", sort_lines=True),
            ShellHistoryTask(),
            CommandTask("lspci_tv", ["lspci", "-tv"], "lspci_tv.txt", "PCI topology tree"),
            CommandTask("lspci_vv", ["lspci", "-vv"], "lspci_vv.txt", "PCI devices (verbose)"),
            CommandTask("numactl_hardware", ["numactl", "--hardware"], "numactl_hardware.txt", "NUMA topology"),
            AggregatedTask("nvidia_smi", GPU_SECTIONS, "nvidia_smi.txt", "NVIDIA GPU diagnostics", requires=("nvidia-smi",)),
            FileTask("dtb", [host.sys / "firmware" / "fdt"], "dtb.dtb", "Flattened device tree blob"),
            CommandTask(
                "dts",
                ["dtc", "-I", "fs", "-O", "dts", host.sys / "firmware" / "devicetree" / "base"],
                "dtb.dts",
                "Decompiled device tree",
            ),
            CommandTask("devices", ["ls", "-lah", f"{host.sys / 'bus' / 'platform' / 'devices'}/"], "devices.txt", "Platform devices"),
            FileTask("xorg", [host.var_log / "Xorg.0.log"], "xorg.txt", "Xorg server log"),
            FileTask("tegra_host1x", [tegra / "devices", tegra / "status_all"], "tegra-host1x.txt", "Tegra host1x devices and status"),
            CommandTask("journalctl", ["journalctl", "-b0"], "journalctl.txt", "System journal (current boot)"),
            KernelConfigTask(host.boot),
            CommandTask("tree_sys", ["tree", host.sys], "tree_sys.txt", f"Directory tree of {host.sys}"),
            CommandTask("tree_etc", ["tree", host.etc], "tree_etc.txt", f"Directory tree of {host.etc}"),
            SystemSummaryTask(),
            AggregatedTask("hwtools", HWTOOLS_SECTIONS, "hwtools.txt", "Hardware inventory (lshw/lscpu/lsblk/lsmem/lsusb)"),
            EnvironmentTask(),
        ]
    )


__all__ = [
    "AggregatedTask",
    "CommandTask",
    "FileTask",
    "Section",
    "Task",
    "TaskContext",
    "TaskRegistry",
    "build_task_catalog",
]
