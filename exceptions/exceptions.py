"""
Custom exceptions for the PrintDesk print pipeline.

These exceptions are intentionally simple and descriptive.
They are used across:

  - core/locator/
  - core/printing/
  - runtime/context.py

Placing them at the project root (exceptions/) avoids circular imports
and keeps exception types consistent across modules.

Anything raised below the command registry may propagate; the registry
turns it into a structured {success: false, error} result.
"""


class PrintPipelineException(Exception):
    """Base class for failures that abort a print job."""


class LocatorNotFoundException(PrintPipelineException):
    """
    Raised when the external print tool cannot be found in any of the
    candidate directories.

    The exception keeps the directories that were probed.
    """

    def __init__(self, tool_name, searched_dirs=None):
        self.tool_name = tool_name
        self.searched_dirs = list(searched_dirs or [])
        msg = f"{tool_name} not found in any of the expected locations"
        if self.searched_dirs:
            msg += ": " + ", ".join(str(d) for d in self.searched_dirs)
        super().__init__(msg)


class GenerationFailureException(PrintPipelineException):
    """
    Raised when the document could not be rendered, or the rendered file
    is missing afterwards.
    """

    def __init__(self, filepath, details=None):
        self.filepath = filepath
        self.details = details or "Generated file does not exist."
        msg = f"PDF generation failed for {filepath}: {self.details}"
        super().__init__(msg)


class NoPrinterFoundException(PrintPipelineException):
    """Raised when no printer was requested and the system has no default."""

    def __init__(self):
        super().__init__("No default printer found")


class PrintInvocationException(PrintPipelineException):
    """
    Raised when the external print tool fails to start or exits with a
    non-zero status.
    """

    def __init__(self, printer, details=None, returncode=None):
        self.printer = printer
        self.returncode = returncode
        self.details = details or "Print tool failed."
        msg = f"Printing to {printer!r} failed: {self.details}"
        if returncode is not None:
            msg += f" (exit code {returncode})"
        super().__init__(msg)
