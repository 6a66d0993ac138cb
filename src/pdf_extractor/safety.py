"""
Safety validation and file guards for the PDF Extractor.

Implements file size limits, path validation, and output directory
preparation so no adapter call is made on an invalid input.
"""

import os
from pathlib import Path
from typing import Optional, Union

from .config import ExtractorConfig
from .errors import FileSizeError, PathTraversalError, PDFFileNotFoundError, UnsupportedFileError


def resolve_path(file_path: Union[str, Path]) -> Path:
    """Expand user and environment variables, then make the path absolute."""
    return Path(os.path.expandvars(os.path.expanduser(str(file_path)))).resolve()


def validate_pdf_path(file_path: Union[str, Path], config: Optional[ExtractorConfig] = None) -> Path:
    """
    Validate PDF file path for safety constraints.

    The file extension is not checked: a file that is not a PDF is rejected
    later by the PDF toolkit with a DocumentOpenError.

    Args:
        file_path: Path to PDF file (string or Path object)
        config: Limits to enforce, defaults to ExtractorConfig()

    Returns:
        Resolved Path object if valid

    Raises:
        PathTraversalError: If path escapes allowed root
        PDFFileNotFoundError: If file doesn't exist
        UnsupportedFileError: If path is not a regular file
        FileSizeError: If file exceeds size limit
    """
    config = config or ExtractorConfig()
    path = resolve_path(file_path)

    # Enforce root constraint only if unrestricted access disabled
    if not config.allow_any_path:
        root = config.allowed_root.resolve()
        try:
            path.relative_to(root)
        except ValueError:
            raise PathTraversalError(
                f"Path '{file_path}' is outside allowed root directory (root={root})"
            )

    if not path.exists():
        raise PDFFileNotFoundError(f"PDF file not found: {path}")

    if not path.is_file():
        raise UnsupportedFileError(f"Path is not a file: {path}")

    file_size = path.stat().st_size
    if file_size > config.max_file_size_bytes:
        size_mb = file_size / (1024 * 1024)
        limit_mb = config.max_file_size_bytes / (1024 * 1024)
        raise FileSizeError(
            f"File size {size_mb:.1f}MB exceeds limit of {limit_mb:.1f}MB",
            hint="Raise PDF_EXTRACTOR_MAX_FILE_SIZE_MB or split the document",
        )

    return path


def prepare_output_dir(output_dir: Union[str, Path]) -> Path:
    """Create the image output directory (and parents) if it is missing."""
    path = resolve_path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a file name stem used to build image artifact names.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename with dangerous characters removed
    """
    dangerous_chars = ['/', '\\', '..', '<', '>', ':', '"', '|', '?', '*']
    sanitized = filename
    for char in dangerous_chars:
        sanitized = sanitized.replace(char, '_')

    # Leave room for the "_page_<n>_img_<k>.<ext>" suffix.
    if len(sanitized) > 200:
        sanitized = sanitized[:200]

    return sanitized or "document"
