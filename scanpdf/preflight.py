"""Preflight checks - fail fast before a single sheet is fed.

Checks, in order:
1. The ramdisk is a mount point
2. A session workspace can be created inside it
3. The compressor and merger programs are installed
4. The upload destination resolves through the ssh configuration
5. The destination accepts TCP connections

The workspace is created before the network checks so that the cleanup
routine always has a directory to remove.
"""

from __future__ import annotations

import logging
import os
import shutil
import socket
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_UPLOAD_TARGET, PROBE_TIMEOUT_SECONDS
from .exceptions import (
    DependencyError,
    DestinationUnreachableError,
    NetworkError,
    PreflightError,
    WorkspaceError,
)
from .stages.base import run_command

logger = logging.getLogger(__name__)

REQUIRED_PROGRAMS: dict[str, str] = {
    "gm": "graphicsmagick",
    "pdfunite": "pdfunite",
}


@dataclass(frozen=True)
class Destination:
    """Network endpoint of the upload target."""

    hostname: str
    port: int

    def __str__(self) -> str:
        return f"{self.hostname}:{self.port}"


def check_ramdisk(ramdisk: Path) -> None:
    if not os.path.ismount(ramdisk):
        raise WorkspaceError(f"{ramdisk} is not mounted")


def create_workspace(ramdisk: Path) -> Path:
    """Create the per-run temporary directory inside ``ramdisk``."""
    try:
        workspace = Path(tempfile.mkdtemp(prefix="tmp.", dir=ramdisk))
    except OSError as e:
        raise WorkspaceError(f"Error creating temporary folder: {e}") from e
    logger.info("Using temporary folder %s", workspace)
    return workspace


def check_dependencies(programs: dict[str, str] | None = None) -> None:
    for program, description in (programs or REQUIRED_PROGRAMS).items():
        if shutil.which(program) is None:
            raise DependencyError(f"Can't find {description}")


def _config_value(ssh_config: str, key: str) -> str:
    for line in ssh_config.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) == 2 and parts[0].lower() == key:
            return parts[1].strip()
    return ""


def resolve_destination(target: str = DEFAULT_UPLOAD_TARGET) -> Destination:
    """Resolve ``target`` to hostname and port with ``ssh -G``.

    Raises:
        NetworkError: If ssh cannot evaluate its configuration
        PreflightError: If hostname or port is missing
    """
    try:
        completed = run_command(["ssh", "-G", target])
    except (OSError, subprocess.SubprocessError) as e:
        raise NetworkError(f"ssh -G {target} failed") from e

    hostname = _config_value(completed.stdout, "hostname")
    port = _config_value(completed.stdout, "port")
    if not hostname or not port.isdigit():
        raise PreflightError(f"ssh -G {target}: hostname or port missing")
    return Destination(hostname, int(port))


def probe_destination(destination: Destination, timeout: float = PROBE_TIMEOUT_SECONDS) -> None:
    """Open and immediately close a TCP connection to ``destination``."""
    try:
        with socket.create_connection((destination.hostname, destination.port), timeout=timeout):
            pass
    except OSError as e:
        raise DestinationUnreachableError(f"Upload destination {destination} not available: {e}") from e


def check_destination(target: str = DEFAULT_UPLOAD_TARGET, timeout: float = PROBE_TIMEOUT_SECONDS) -> Destination:
    """Resolve the upload target and verify it is reachable."""
    destination = resolve_destination(target)
    probe_destination(destination, timeout)
    logger.debug("Upload destination %s reachable", destination)
    return destination
