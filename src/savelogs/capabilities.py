"""Tool discovery and best-effort package installation."""
from __future__ import annotations

import logging
from shutil import which
from typing import Iterable, Optional, Sequence

LOGGER = logging.getLogger("savelogs.capabilities")


def is_available(tool: str) -> bool:
    """Return True when *tool* resolves to an executable on PATH."""
    return which(tool) is not None


def first_available(tools: Iterable[str]) -> Optional[str]:
    for tool in tools:
        if is_available(tool):
            return tool
    return None


def missing_tools(tools: Sequence[str]) -> list:
    return [tool for tool in tools if not is_available(tool)]
