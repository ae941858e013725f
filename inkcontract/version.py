"""Build the full version string: package version, git commit and platform."""

from __future__ import annotations

import logging
import platform
import subprocess
from importlib.metadata import PackageNotFoundError, version

_log = logging.getLogger(__name__)

_OS_SUFFIX = {
    "linux": "unknown-linux-gnu",
    "darwin": "apple-darwin",
    "windows": "pc-windows-msvc",
    "freebsd": "unknown-freebsd",
}

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "x86": "i686",
}


def git_commit() -> str:
    """The short hash of HEAD, or ``unknown`` when git cannot tell."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        _log.warning("Failed to execute git command: %s", exc)
        return "unknown"
    if result.returncode != 0:
        _log.warning("Git command failed with status: %s", result.returncode)
        return "unknown"
    return result.stdout.decode("utf-8", errors="replace").strip()


def current_platform() -> str:
    """A target-triple style name of the running platform."""
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine) or "unknown"
    system = platform.system().lower()
    suffix = _OS_SUFFIX.get(system, f"unknown-{system}" if system else "unknown")
    return f"{arch}-{suffix}"


def _package_version() -> str:
    try:
        return version("inkcontract")
    except PackageNotFoundError:
        return ""


def get_version(impl_commit: str) -> str:
    """Combine package version, commit hash and platform into one string."""
    commit_dash = "-" if impl_commit else ""
    return f"{_package_version()}{commit_dash}{impl_commit}-{current_platform()}"