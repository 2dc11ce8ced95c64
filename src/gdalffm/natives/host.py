"""Maps the running interpreter's platform onto a native classifier."""

import platform

from .exceptions import ConfigurationError


def _normalize_os(os_name: str) -> str:
    if not os_name or not os_name.strip():
        raise ConfigurationError("Operating system name is empty.")
    name = os_name.lower()
    if "mac" in name or "darwin" in name:
        return "osx"
    if "win" in name:
        return "windows"
    if "linux" in name:
        return "linux"
    raise ConfigurationError(f"Unsupported operating system for GDAL bundle: {os_name}")


def _normalize_arch(machine: str) -> str:
    if not machine or not machine.strip():
        raise ConfigurationError("CPU architecture name is empty.")
    arch = machine.lower()
    if arch in ("amd64", "x86_64"):
        return "x86_64"
    if arch in ("aarch64", "arm64"):
        return "aarch64"
    raise ConfigurationError(f"Unsupported architecture for GDAL bundle: {machine}")


def host_classifier(system: str | None = None, machine: str | None = None) -> str:
    os_name = platform.system() if system is None else system
    arch = platform.machine() if machine is None else machine
    return f"{_normalize_os(os_name)}-{_normalize_arch(arch)}"
