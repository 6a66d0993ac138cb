"""Human-readable reports for extraction results.

The CLI prints these to stdout; the MCP tools send them as text content
blocks.
"""

from typing import Iterable, Union

from .models import CombinedResult, ImageArtifact, ImageKind, PageContent, PageText, TextExtractionResult

RULE = "━" * 60
EMPTY_PAGE = "(empty page)"


def page_header(page_number: int) -> str:
    return f"── Page {page_number} {'─' * 45}"


def _metadata_lines(result: Union[TextExtractionResult, CombinedResult], include_subject: bool) -> list[str]:
    lines = []
    if result.metadata.title:
        lines.append(f"Title: {result.metadata.title}")
    if result.metadata.author:
        lines.append(f"Author: {result.metadata.author}")
    if include_subject and result.metadata.subject:
        lines.append(f"Subject: {result.metadata.subject}")
    return lines


def page_section(page: Union[PageText, PageContent]) -> str:
    return f"{page_header(page.page_number)}\n{page.text or EMPTY_PAGE}\n"


def image_line(image: ImageArtifact) -> str:
    """One-line summary: page, kind, size and destination."""
    if image.kind is ImageKind.EMBEDDED:
        label = f"embedded image #{image.image_index}"
    else:
        label = "full page render"
    line = f"• Page {image.page_number} ({label}): {image.width}×{image.height}px"
    if image.path is not None:
        line += f" → {image.path}"
    return line


def format_text_report(result: Union[TextExtractionResult, CombinedResult], icon: str = "📄") -> str:
    """Document-viewer style report of page text."""
    lines = [f"{icon} PDF: {result.file}", RULE, f"Pages: {result.total_pages}"]
    lines.extend(_metadata_lines(result, include_subject=True))
    lines.append("")
    report = "\n".join(lines) + "\n"
    for page in result.pages:
        report += page_section(page) + "\n"
    return report


def format_images_report(file: str, total_pages: int, images: Iterable[ImageArtifact]) -> str:
    """List every extracted image with its dimensions and destination."""
    images = list(images)
    lines = [f"🖼️ Images from: {file}", RULE, f"Pages: {total_pages}", f"Images: {len(images)}", ""]
    lines.extend(f"  {image_line(image)}" for image in images)
    return "\n".join(lines) + "\n"


def format_all_summary(result: CombinedResult) -> str:
    """Header block for a combined extraction."""
    lines = [
        f"📄🖼️ Full PDF Extraction: {result.file}",
        RULE,
        f"Total Pages: {result.total_pages}",
        f"Total Images: {result.total_images}",
    ]
    lines.extend(_metadata_lines(result, include_subject=False))
    return "\n".join(lines) + "\n"


def format_page_block(page: PageContent) -> str:
    """Text of one page followed by a count of its images."""
    block = page_section(page)
    if page.images:
        block += f"\n[{len(page.images)} image(s) on this page]\n"
    return block
