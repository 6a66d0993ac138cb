"""
Error taxonomy and MCP error helpers for the PDF Extractor.

Fatal conditions are raised as PDFExtractionError subclasses and reported by
the front-ends. Non-fatal conditions (missing metadata, an embedded image that
cannot be decoded) are absorbed inside the extraction core and never raised.
"""

from typing import Optional
import logging

from mcp.types import CallToolResult, TextContent

logger = logging.getLogger(__name__)


class PDFExtractionError(Exception):
    """Base exception for extraction failures reported to the caller."""

    code = "Internal"

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class PDFFileNotFoundError(PDFExtractionError, FileNotFoundError):
    """Raised when the input path does not exist."""

    code = "FileNotFound"


class DocumentOpenError(PDFExtractionError):
    """Raised when the PDF toolkit cannot parse the document bytes."""

    code = "DocumentOpenFailure"


class InvalidArgumentError(PDFExtractionError, ValueError):
    """Raised when an extraction option or tool argument is invalid."""

    code = "UserInput"


class ConfigError(PDFExtractionError):
    """Raised when an environment setting cannot be parsed."""

    code = "Config"


class PDFSafetyError(PDFExtractionError):
    """Base exception for PDF safety violations."""

    code = "Forbidden"


class FileSizeError(PDFSafetyError):
    """Raised when file exceeds size limit."""

    code = "UserInput"


class PathTraversalError(PDFSafetyError):
    """Raised when path attempts to escape allowed root."""


class UnsupportedFileError(PDFSafetyError):
    """Raised when the path is not a regular file."""

    code = "UserInput"


def error_text(exc: BaseException) -> str:
    """Render an exception as the one-line message shown to users."""
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    hint = getattr(exc, "hint", None)
    if hint:
        return f"Error: {message} (hint: {hint})"
    return f"Error: {message}"


def error_result(message: str) -> CallToolResult:
    """Return an error-flagged tool result holding a single text block."""
    return CallToolResult(
        content=[TextContent(type="text", text=message)],
        isError=True,
    )


def exception_result(exc: BaseException) -> CallToolResult:
    """Convert any exception raised under a tool call into an error result."""
    if not isinstance(exc, (PDFExtractionError, OSError)):
        logger.error(f"Unexpected tool failure: {exc!r}")
    return error_result(error_text(exc))
