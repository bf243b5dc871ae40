"""
savelogs collects kernel, hardware and GPU diagnostics from a Linux host into
one directory per identifier, then lists them in a manifest and summary.

Run it through the ``save-logs`` console script; ``savelogs.harness.LogCollector``
is the programmatic entry point.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("savelogs")
except PackageNotFoundError:  # pragma: no cover - running from an uninstalled tree
    __version__ = "0.0.0"

__all__ = ["__version__"]
