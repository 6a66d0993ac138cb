"""
Adapters over the external PDF libraries.

PyMuPDF is the source of truth for page content: opening documents, page
text, page rasterization, and embedded image blocks. pypdf is consulted only
for the document info dictionary.
"""

import io
import logging
from typing import Iterator, Optional, Tuple

# PDF processing imports
try:
    import fitz  # PyMuPDF
    from pypdf import PdfReader
except ImportError as e:
    raise ImportError(f"Required PDF processing library not installed: {e}")

from .errors import DocumentOpenError
from .models import DocumentMetadata, ImageFormat


logger = logging.getLogger(__name__)

TEXT_FLAGS = fitz.TEXTFLAGS_TEXT | fitz.TEXT_PRESERVE_WHITESPACE
IMAGE_BLOCK_FLAGS = fitz.TEXTFLAGS_DICT | fitz.TEXT_PRESERVE_IMAGES
IMAGE_BLOCK_TYPE = 1


def open_pdf_document(data: bytes) -> "fitz.Document":
    """
    Open a PDF document from its raw bytes.

    Raises:
        DocumentOpenError: If the bytes are not a readable PDF or the
            document is password protected.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (fitz.FileDataError, RuntimeError, ValueError) as e:
        raise DocumentOpenError(
            f"Could not open PDF document: {e}",
            hint="Ensure the file is a valid, unencrypted PDF",
        ) from e

    if doc.needs_pass:
        doc.close()
        raise DocumentOpenError("PDF file is encrypted and requires a password")

    return doc


def page_text(page: "fitz.Page") -> str:
    """Plain text of a page with whitespace preserved."""
    return page.get_text("text", flags=TEXT_FLAGS)


def render_page(page: "fitz.Page", scale: float) -> "fitz.Pixmap":
    """Rasterize a full page: RGB, no alpha, annotations drawn."""
    return page.get_pixmap(
        matrix=fitz.Matrix(scale, scale),
        colorspace=fitz.csRGB,
        alpha=False,
        annots=True,
    )


def iter_image_blocks(page: "fitz.Page") -> Iterator[Tuple[Tuple[float, float, float, float], bytes]]:
    """Yield (bbox, encoded image bytes) for each image block of a page."""
    content = page.get_text("dict", flags=IMAGE_BLOCK_FLAGS)
    for block in content.get("blocks", []):
        if block.get("type") != IMAGE_BLOCK_TYPE:
            continue
        yield tuple(block["bbox"]), block.get("image", b"")


def decode_image(image_bytes: bytes) -> "fitz.Pixmap":
    """Decode an embedded image into an RGB pixmap without alpha."""
    if not image_bytes:
        raise ValueError("image block carries no data")

    pixmap = fitz.Pixmap(image_bytes)
    if pixmap.colorspace is None or pixmap.colorspace.n != 3:
        pixmap = fitz.Pixmap(fitz.csRGB, pixmap)
    if pixmap.alpha:
        pixmap = fitz.Pixmap(pixmap, 0)
    return pixmap


def encode_pixmap(pixmap: "fitz.Pixmap", image_format: ImageFormat, jpeg_quality: int = 85) -> bytes:
    """Encode a pixmap as PNG or JPEG."""
    if image_format is ImageFormat.JPEG:
        return pixmap.tobytes("jpg", jpg_quality=jpeg_quality)
    return pixmap.tobytes("png")


def _text_or_none(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def read_document_metadata(data: bytes) -> Optional[DocumentMetadata]:
    """
    Read the document info dictionary with pypdf.

    Returns:
        DocumentMetadata, or None when pypdf cannot read the document or it
        carries no info dictionary. Never raises.
    """
    try:
        info = PdfReader(io.BytesIO(data)).metadata
        if info is None:
            return None
        return DocumentMetadata(
            title=_text_or_none(info.title),
            author=_text_or_none(info.author),
            subject=_text_or_none(info.subject),
            creator=_text_or_none(info.creator),
            producer=_text_or_none(info.producer),
            creation_date=_text_or_none(info.creation_date_raw),
            modification_date=_text_or_none(info.modification_date_raw),
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug(f"Metadata unavailable: {e}")
        return None
