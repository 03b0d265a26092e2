"""
core.printing.printers

System-facing parts of the print pipeline:

  - SystemPrinterResolver: asks the OS for its default printer
  - SumatraPrintInvoker: runs the SumatraPDF command line against a file

Both are behind small protocols so the pipeline can be exercised without
a real printer.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Protocol

from exceptions.exceptions import PrintInvocationException


logger = logging.getLogger(__name__)


class PrinterResolver(Protocol):
    async def get_default_printer(self) -> Optional[str]:
        ...


class PrintInvoker(Protocol):
    async def print_file(
        self, path: Path, printer: str, tool_path: Path, silent: bool = True
    ) -> None:
        ...


async def _run(cmd: List[str]) -> tuple[int, str, str]:
    """Run a command and return (returncode, stdout, stderr)."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return (
        proc.returncode,
        stdout.decode(errors="replace").strip(),
        stderr.decode(errors="replace").strip(),
    )


def parse_lpstat_default(output: str) -> Optional[str]:
    """Extract the printer name from `lpstat -d` output.

    "system default destination: Office" -> "Office"
    "no system default destination"      -> None
    """
    for line in output.splitlines():
        if ":" in line and "default destination" in line:
            name = line.split(":", 1)[1].strip()
            return name or None
    return None


class SystemPrinterResolver:
    """Default printer lookup via PowerShell (Windows) or CUPS (elsewhere).

    Any failure (missing command, non-zero exit) resolves to None so the
    pipeline can report a clean NoPrinterFound.
    """

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    def command(self) -> List[str]:
        if self.platform.startswith("win"):
            return [
                "powershell",
                "-NoProfile",
                "-Command",
                "(Get-CimInstance -ClassName Win32_Printer -Filter 'Default=true').Name",
            ]
        return ["lpstat", "-d"]

    async def get_default_printer(self) -> Optional[str]:
        try:
            returncode, stdout, stderr = await _run(self.command())
        except OSError as e:
            logger.warning("Could not query default printer: %s", e)
            return None

        if returncode != 0:
            logger.warning("Default printer query failed (%s): %s", returncode, stderr)
            return None

        if self.platform.startswith("win"):
            return stdout.splitlines()[0].strip() if stdout else None
        return parse_lpstat_default(stdout)


class SumatraPrintInvoker:
    """
    Prints a PDF through the SumatraPDF command line:

        SumatraPDF.exe -print-to "<printer>" [-silent] <file>

    The call is awaited until the tool exits. There is no timeout.
    """

    def build_command(
        self, path: Path, printer: str, tool_path: Path, silent: bool = True
    ) -> List[str]:
        cmd = [str(tool_path), "-print-to", printer]
        if silent:
            cmd.append("-silent")
        cmd.append(str(path))
        return cmd

    async def print_file(
        self, path: Path, printer: str, tool_path: Path, silent: bool = True
    ) -> None:
        cmd = self.build_command(path, printer, tool_path, silent)
        try:
            returncode, _, stderr = await _run(cmd)
        except OSError as e:
            raise PrintInvocationException(printer, details=str(e)) from e

        if returncode != 0:
            raise PrintInvocationException(
                printer, details=stderr or "Print tool reported an error.", returncode=returncode
            )
