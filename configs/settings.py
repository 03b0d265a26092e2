from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


# Repository root; used to find development copies of the print tool.
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings:
    """
    Central configuration for PrintDesk.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # Runtime mode ("development" echoes log entries to the console)
        self._env = os.getenv("PRINTDESK_ENV", "production")

        # Log store location
        default_log_dir = (
            PROJECT_ROOT / "logs"
            if self._env == "development"
            else Path.home() / ".printdesk" / "logs"
        )
        self._log_dir = Path(os.getenv("PRINTDESK_LOG_DIR") or default_log_dir)

        # Generated documents land here before being printed
        self._temp_dir = Path(
            os.getenv("PRINTDESK_TEMP_DIR")
            or Path(tempfile.gettempdir()) / "printdesk"
        )

        # External print tool lookup
        resources_dir = os.getenv("PRINTDESK_RESOURCES_DIR")
        self._resources_dir: Optional[Path] = Path(resources_dir) if resources_dir else None
        self._extra_tool_dirs = [
            Path(p)
            for p in os.getenv("PRINTDESK_TOOL_DIRS", "").split(os.pathsep)
            if p
        ]
        self._tool_name = os.getenv("PRINTDESK_TOOL_NAME", "SumatraPDF")

        # Printer override (falls back to the system default)
        self._printer = os.getenv("PRINTDESK_PRINTER") or None

        # Local API server
        self._host = os.getenv("PRINTDESK_HOST", "127.0.0.1")
        self._port = int(os.getenv("PRINTDESK_PORT", "8765"))

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------

    @property
    def env(self) -> str:
        return self._env

    @property
    def is_development(self) -> bool:
        return self._env == "development"

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def project_root(self) -> Path:
        return PROJECT_ROOT

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    @property
    def resources_dir(self) -> Optional[Path]:
        return self._resources_dir

    @property
    def extra_tool_dirs(self) -> List[Path]:
        return list(self._extra_tool_dirs)

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def printer(self) -> Optional[str]:
        return self._printer

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port


settings = Settings()
