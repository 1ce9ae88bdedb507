"""Scanner command line assembly.

The device's capabilities are probed once with ``scanimage -A``; every option
of the configured table is added only when its token appears in that output,
so the same configuration works across scanner models.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path

from .constants import BATCH_PATTERN, DEFAULT_DPI, DEFAULT_SCAN_OPTIONS, DUPLEX_SOURCE
from .exceptions import PreflightError, ScannerNotFoundError
from .stages.base import run_command

logger = logging.getLogger(__name__)

__all__ = ["probe_capabilities", "select_options", "build_scan_command"]


def probe_capabilities(program: str = "scanimage") -> str:
    """Return the scanner's advertised options (``scanimage -A``).

    Raises:
        ScannerNotFoundError: If the probe fails
        PreflightError: If the probe succeeds but reports nothing
    """
    try:
        completed = run_command([program, "-A"])
    except (OSError, subprocess.SubprocessError) as e:
        raise ScannerNotFoundError("Error getting available options. Is the scanner attached?") from e

    capabilities = completed.stdout
    if not capabilities.strip():
        raise PreflightError(f"{program} -A returned no capabilities")
    return capabilities


def select_options(capabilities: str, options: Iterable[tuple[str, Sequence[str]]]) -> list[str]:
    """Arguments of every table entry whose token is advertised.

    Example:
        >>> select_options("    --mode Lineart|Color\\n", [("--mode ", ["--mode=Color"]), ("-l ", ["-l", "0"])])
        ['--mode=Color']
    """
    selected: list[str] = []
    for token, args in options:
        if token in capabilities:
            selected.extend(args)
        else:
            logger.debug("Scanner does not advertise %r, skipping", token.strip())
    return selected


def build_scan_command(
    workspace: Path,
    capabilities: str,
    dpi: int = DEFAULT_DPI,
    options: Iterable[tuple[str, Sequence[str]]] = DEFAULT_SCAN_OPTIONS,
    program: str = "scanimage",
) -> list[str]:
    """Assemble the interactive batch scan command.

    Args:
        workspace: Session directory raw pages are written to
        capabilities: Output of :func:`probe_capabilities`
        dpi: Scan resolution
        options: (token, arguments) table
        program: Scanner executable

    Returns:
        Command line list
    """
    command = [
        program,
        f"--batch={workspace / BATCH_PATTERN}",
        "--batch-prompt",
        "--batch-print",
    ]
    if "--resolution " in capabilities:
        command.append(f"--resolution={dpi}")

    command.extend(select_options(capabilities, options))

    if "--source " in capabilities and DUPLEX_SOURCE in capabilities:
        command.extend(["--source", DUPLEX_SOURCE])
    else:
        # Flatbed scanners would otherwise repeat the same page forever
        command.append("--batch-count=1")

    return command
