"""
core.locator.executable_locator

Finds the external print helper (SumatraPDF by default) on disk.

Candidate directories are probed strictly in order; the first directory
that contains a file named like `SumatraPDF-<version>.exe` wins. Matches
are never aggregated across directories.

Used by:
  - core/printing/pipeline.py
  - cli/main.py (`locate` command)
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Union

from configs.settings import Settings
from exceptions.exceptions import LocatorNotFoundException


PathLike = Union[str, Path]


def default_candidate_dirs(settings: Settings) -> List[Path]:
    """
    Ordered probe locations for the print tool:

      1. bundled resources directory (PRINTDESK_RESOURCES_DIR)
      2. development dependency directory: <project_root>/vendor/sumatra
      3. <project_root>/resources
      4. `resources` next to the running interpreter
      5. any extra directories from PRINTDESK_TOOL_DIRS

    Duplicates are dropped, keeping the first occurrence.
    """
    candidates: List[Optional[Path]] = [
        settings.resources_dir,
        settings.project_root / "vendor" / "sumatra",
        settings.project_root / "resources",
        Path(sys.executable).resolve().parent / "resources",
        *settings.extra_tool_dirs,
    ]

    seen = set()
    ordered: List[Path] = []
    for path in candidates:
        if path is None or path in seen:
            continue
        seen.add(path)
        ordered.append(path)
    return ordered


class ExecutableLocator:
    """
    Resolves the path of a `<tool_name>-<version>.<extension>` binary.

    The log store is optional so the locator can be used before the
    runtime is set up (e.g. from the CLI).
    """

    def __init__(
        self,
        tool_name: str = "SumatraPDF",
        extension: str = "exe",
        log_store=None,
    ) -> None:
        self.tool_name = tool_name
        self.extension = extension
        self.log_store = log_store
        self.pattern = re.compile(
            rf"^{re.escape(tool_name)}-.*\.{re.escape(extension)}$",
            re.IGNORECASE,
        )

    def matches(self, filename: str) -> bool:
        return bool(self.pattern.match(filename))

    def locate(self, candidate_dirs: Iterable[Optional[PathLike]]) -> Path:
        """
        Return the first matching file from the first directory that has one.

        Raises
        ------
        LocatorNotFoundException
            If no candidate directory contains a match. Missing or
            unreadable directories count as "no match".
        """
        searched: List[Path] = []

        for candidate in candidate_dirs:
            if not candidate:
                continue
            directory = Path(candidate)
            searched.append(directory)

            found = self._probe(directory)
            if found is not None:
                self._info(f"Found {self.tool_name} at: {found}")
                return found

        raise LocatorNotFoundException(self.tool_name, searched)

    def _probe(self, directory: Path) -> Optional[Path]:
        if not directory.is_dir():
            return None

        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            self._warn(
                f"Error reading directory {directory}",
                {"error": str(e), "directory": str(directory)},
            )
            return None

        for name in names:
            if not self.matches(name):
                continue
            path = directory / name
            if path.is_file():
                return path
        return None

    def _info(self, message: str) -> None:
        if self.log_store is not None:
            self.log_store.info(message)

    def _warn(self, message: str, details: dict) -> None:
        if self.log_store is not None:
            self.log_store.warn(message, details)
