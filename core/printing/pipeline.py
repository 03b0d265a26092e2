"""
core.printing.pipeline

PrintPipeline: generate -> locate tool -> resolve printer -> print -> clean up.

Each job writes its own temp file:

    <directory>/<filename>-<unix-ms>-<random>.pdf

and that file is removed after the print attempt whether it succeeded or
not (unless the caller passes cleanup=False). Failures are logged to the
LogStore and re-raised after cleanup.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional
from uuid import uuid4

from pydantic import BaseModel

from core.locator.executable_locator import ExecutableLocator
from core.printing.document import DocumentRenderer, ReportLabRenderer
from core.printing.printers import (
    PrinterResolver,
    PrintInvoker,
    SumatraPrintInvoker,
    SystemPrinterResolver,
)
from exceptions.exceptions import (
    GenerationFailureException,
    NoPrinterFoundException,
    PrintInvocationException,
    PrintPipelineException,
)


class PrintOptions(BaseModel):
    filename: str = "document"
    directory: Optional[str] = None
    printer: Optional[str] = None
    silent: bool = True
    cleanup: bool = True


class PrintPipeline:
    """
    Orchestrates one print job per `print_document` call.

    Parameters
    ----------
    log_store:
        LogStore receiving progress and failure entries.
    locator:
        Finds the print tool. Its result is cached after the first success.
    candidate_dirs:
        Zero-argument callable returning the directories to probe.
    temp_dir:
        Default directory for generated files.
    renderer / printer_resolver / invoker:
        Collaborators; defaults use ReportLab, the OS default printer and
        the SumatraPDF command line.
    clock:
        Returns the current time in seconds; used for file name suffixes.
    """

    def __init__(
        self,
        log_store,
        locator: ExecutableLocator,
        candidate_dirs: Callable[[], Iterable[Path]],
        temp_dir: Path,
        renderer: Optional[DocumentRenderer] = None,
        printer_resolver: Optional[PrinterResolver] = None,
        invoker: Optional[PrintInvoker] = None,
        default_printer: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.log_store = log_store
        self.locator = locator
        self.candidate_dirs = candidate_dirs
        self.temp_dir = Path(temp_dir)
        self.renderer = renderer or ReportLabRenderer()
        self.printer_resolver = printer_resolver or SystemPrinterResolver()
        self.invoker = invoker or SumatraPrintInvoker()
        self.default_printer = default_printer
        self._clock = clock

        # The tool does not move at runtime; resolve it once.
        self._tool_path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def job_path(self, options: PrintOptions) -> Path:
        directory = Path(options.directory) if options.directory else self.temp_dir
        timestamp = int(self._clock() * 1000)
        # Jobs started in the same millisecond must not share a file.
        return directory / f"{options.filename}-{timestamp}-{uuid4().hex[:8]}.pdf"

    async def generate(self, doc_definition: Dict[str, Any], path: Path) -> Path:
        """Render the document into `path` and return it."""
        self.log_store.info("Creating PDF file", {"filepath": str(path)})

        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self.renderer.render, doc_definition, path)
        except Exception as e:
            raise GenerationFailureException(path, details=str(e)) from e

        if not path.is_file():
            raise GenerationFailureException(path)

        self.log_store.info("PDF created successfully", {"filepath": str(path)})
        return path

    async def resolve_tool(self) -> Path:
        """Locate the print tool, reusing the cached path when still present."""
        if self._tool_path is not None and self._tool_path.is_file():
            return self._tool_path

        # Runs on the loop thread: the locator writes to the LogStore, whose
        # observers schedule notifications on this loop.
        # LocatorNotFoundException propagates to the caller.
        self._tool_path = self.locator.locate(list(self.candidate_dirs()))
        return self._tool_path

    async def resolve_printer(self, options: PrintOptions) -> str:
        printer = options.printer or self.default_printer
        if not printer:
            printer = await self.printer_resolver.get_default_printer()
        if not printer:
            raise NoPrinterFoundException()
        return printer

    async def cleanup(self, path: Path) -> None:
        """Delete a generated file. Failures are logged, never raised."""
        if not path.exists():
            return
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as e:
            self.log_store.warn(
                "Error cleaning up temp file",
                {"error": str(e), "filepath": str(path)},
            )
            return
        self.log_store.info("Temporary PDF file cleaned up", {"filepath": str(path)})

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    async def print_document(
        self,
        doc_definition: Dict[str, Any],
        options: Optional[PrintOptions] = None,
    ) -> Dict[str, bool]:
        """
        Generate and print `doc_definition`.

        Returns {"success": True}. Raises a PrintPipelineException subclass
        on failure, after the temp file has been cleaned up.
        """
        options = options or PrintOptions()
        path = self.job_path(options)

        try:
            await self.generate(doc_definition, path)
            self.log_store.info("Print operation started", {"filepath": str(path)})

            tool_path = await self.resolve_tool()
            printer = await self.resolve_printer(options)
            self.log_store.info("Using printer", {"printerName": printer})

            try:
                await self.invoker.print_file(path, printer, tool_path, options.silent)
            except PrintPipelineException:
                raise
            except Exception as e:
                raise PrintInvocationException(printer, details=str(e)) from e

            self.log_store.info("Print job completed successfully")
            return {"success": True}

        except Exception as e:
            self.log_store.error("Print operation failed", e)
            raise

        finally:
            if options.cleanup:
                await self.cleanup(path)
