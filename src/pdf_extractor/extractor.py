"""
Core PDF extraction logic.

Orchestrates the PDF adapters into three operations: text for every page,
images (full-page renders plus embedded images) for every page, and both
merged per page.
"""

import asyncio
import base64
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from .adapters import (
    decode_image,
    encode_pixmap,
    iter_image_blocks,
    open_pdf_document,
    page_text,
    read_document_metadata,
    render_page,
)
from .config import ExtractorConfig
from .errors import InvalidArgumentError
from .models import (
    BoundingBox,
    CombinedResult,
    DiskImage,
    DocumentMetadata,
    ExtractionRequest,
    ImageArtifact,
    ImageExtractionResult,
    ImageFormat,
    ImageKind,
    ImageOutput,
    InlineImage,
    PageContent,
    PageText,
    TextExtractionResult,
)
from .safety import prepare_output_dir, sanitize_filename, validate_pdf_path


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PDFExtractor:
    """Extracts text and images from PDF files."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        open_document: Callable = open_pdf_document,
        read_metadata: Callable[[bytes], Optional[DocumentMetadata]] = read_document_metadata,
    ):
        self.config = config or ExtractorConfig()
        self._open_document = open_document
        self._read_metadata = read_metadata

    def _load(self, file_path: PathLike) -> Tuple[Path, bytes]:
        """Validate the input path and read the document bytes once."""
        path = validate_pdf_path(file_path, self.config)
        return path, path.read_bytes()

    def validate_dpi(self, dpi) -> int:
        if isinstance(dpi, bool) or not isinstance(dpi, int) or dpi < 1:
            raise InvalidArgumentError(f"DPI must be a positive integer, got {dpi!r}")
        if dpi > self.config.max_dpi:
            raise InvalidArgumentError(
                f"DPI {dpi} exceeds limit of {self.config.max_dpi}",
                hint="Use a lower resolution or raise PDF_EXTRACTOR_MAX_DPI",
            )
        return dpi

    async def extract_text(self, file_path: PathLike) -> TextExtractionResult:
        """
        Extract text from every page, with document metadata.

        Args:
            file_path: Path to PDF file

        Returns:
            TextExtractionResult with one PageText per page, in page order
        """
        path, data = self._load(file_path)

        metadata = await asyncio.to_thread(self._read_metadata, data)
        if metadata is None:
            logger.debug(f"No metadata recovered for {path}")

        doc = self._open_document(data)
        try:
            pages: List[PageText] = []
            for index, page in enumerate(doc):
                # Cooperative yield
                await asyncio.sleep(0)
                pages.append(PageText(page_number=index + 1, text=page_text(page).strip()))
        finally:
            doc.close()

        logger.info(f"Extracted text from {len(pages)} pages of {path}")
        return TextExtractionResult(
            file=str(path),
            total_pages=len(pages),
            metadata=metadata or DocumentMetadata.empty(),
            pages=pages,
            metadata_available=metadata is not None,
        )

    async def extract_images(
        self,
        file_path: PathLike,
        output_dir: Optional[PathLike] = None,
        image_format: Union[str, ImageFormat, None] = None,
        inline: bool = False,
        dpi: Optional[int] = None,
    ) -> ImageExtractionResult:
        """
        Render every page and extract the embedded images it contains.

        Args:
            file_path: Path to PDF file
            output_dir: Where image files are written, defaults to the PDF's directory
            image_format: "png" (default) or "jpeg"
            inline: Return base64 data instead of writing files
            dpi: Render resolution, defaults to the configured DPI

        Returns:
            ImageExtractionResult ordered by page, then image index
        """
        dpi = self.validate_dpi(self.config.default_dpi if dpi is None else dpi)
        image_format = ImageFormat.parse(image_format)
        path, data = self._load(file_path)
        request = ExtractionRequest.create(path, output_dir, image_format, dpi, inline)

        target_dir = None
        if not request.inline:
            target_dir = prepare_output_dir(request.target_dir)

        stem = sanitize_filename(path.stem)
        images: List[ImageArtifact] = []

        doc = self._open_document(data)
        try:
            total_pages = len(doc)
            for index, page in enumerate(doc):
                await asyncio.sleep(0)
                page_number = index + 1

                pixmap = render_page(page, request.scale)
                encoded = encode_pixmap(pixmap, request.image_format, self.config.jpeg_quality)
                images.append(
                    ImageArtifact(
                        page_number=page_number,
                        image_index=0,
                        width=pixmap.width,
                        height=pixmap.height,
                        image_format=request.image_format,
                        kind=ImageKind.PAGE_RENDER,
                        output=self._emit(encoded, request, target_dir, f"{stem}_page_{page_number}"),
                    )
                )
                images.extend(self._embedded_images(page, page_number, request, target_dir, stem))
        finally:
            doc.close()

        logger.info(f"Extracted {len(images)} images from {total_pages} pages of {path}")
        return ImageExtractionResult(file=str(path), total_pages=total_pages, images=images)

    def _embedded_images(
        self,
        page,
        page_number: int,
        request: ExtractionRequest,
        target_dir: Optional[Path],
        stem: str,
    ) -> List[ImageArtifact]:
        """Extract the embedded images of one page, skipping any that fail."""
        artifacts: List[ImageArtifact] = []
        try:
            blocks = list(iter_image_blocks(page))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning(f"Could not list embedded images on page {page_number}: {e}")
            return artifacts

        for bbox, image_bytes in blocks:
            image_index = len(artifacts) + 1
            try:
                pixmap = decode_image(image_bytes)
                encoded = encode_pixmap(pixmap, request.image_format, self.config.jpeg_quality)
                output = self._emit(
                    encoded, request, target_dir, f"{stem}_page_{page_number}_img_{image_index}"
                )
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning(f"Skipping embedded image on page {page_number}: {e}")
                continue

            artifacts.append(
                ImageArtifact(
                    page_number=page_number,
                    image_index=image_index,
                    width=pixmap.width,
                    height=pixmap.height,
                    image_format=request.image_format,
                    kind=ImageKind.EMBEDDED,
                    output=output,
                    bbox=BoundingBox.from_rect(bbox),
                )
            )
        return artifacts

    @staticmethod
    def _emit(
        encoded: bytes,
        request: ExtractionRequest,
        target_dir: Optional[Path],
        name: str,
    ) -> ImageOutput:
        """Write the image to disk, or wrap it as base64 in inline mode."""
        if request.inline:
            return InlineImage(
                data=base64.b64encode(encoded).decode("ascii"),
                mime_type=request.image_format.mime_type,
            )
        destination = target_dir / f"{name}.{request.image_format.extension}"
        destination.write_bytes(encoded)
        return DiskImage(path=destination)

    async def extract_all(
        self,
        file_path: PathLike,
        output_dir: Optional[PathLike] = None,
        image_format: Union[str, ImageFormat, None] = None,
        inline: bool = False,
        dpi: Optional[int] = None,
    ) -> CombinedResult:
        """
        Extract text and images together and group the images by page.

        Both extractions run concurrently; if either fails the other is
        cancelled and the first error is raised.
        """
        try:
            async with asyncio.TaskGroup() as group:
                text_task = group.create_task(self.extract_text(file_path))
                image_task = group.create_task(
                    self.extract_images(
                        file_path,
                        output_dir=output_dir,
                        image_format=image_format,
                        inline=inline,
                        dpi=dpi,
                    )
                )
        except ExceptionGroup as group_error:
            raise group_error.exceptions[0] from None

        text_result, image_result = text_task.result(), image_task.result()

        by_page: Dict[int, List[ImageArtifact]] = {}
        for image in image_result.images:
            by_page.setdefault(image.page_number, []).append(image)

        return CombinedResult(
            file=text_result.file,
            total_pages=text_result.total_pages,
            metadata=text_result.metadata,
            total_images=image_result.total_images,
            pages=[
                PageContent(
                    page_number=page.page_number,
                    text=page.text,
                    images=by_page.get(page.page_number, []),
                )
                for page in text_result.pages
            ],
        )
