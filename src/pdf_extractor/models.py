"""
Data model for PDF extraction results.

Results are plain dataclasses built once per call and never persisted; the
only durable record of an extraction is the image files written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from .errors import InvalidArgumentError
from .safety import resolve_path


class ImageFormat(str, Enum):
    """Encoding used for rendered and embedded images."""

    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self is ImageFormat.JPEG else "image/png"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else "png"

    @classmethod
    def parse(cls, value: Union[str, "ImageFormat", None]) -> "ImageFormat":
        if value is None:
            return cls.PNG
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgumentError(
                f"Unsupported image format: {value}",
                hint="Use 'png' or 'jpeg'",
            )


class ImageKind(str, Enum):
    PAGE_RENDER = "page-render"
    EMBEDDED = "embedded"


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """Options for one image extraction call."""

    file_path: Path
    output_dir: Optional[Path] = None
    image_format: ImageFormat = ImageFormat.PNG
    dpi: int = 150
    inline: bool = False

    @classmethod
    def create(
        cls,
        file_path: Union[str, Path],
        output_dir: Union[str, Path, None] = None,
        image_format: Union[str, ImageFormat, None] = None,
        dpi: int = 150,
        inline: bool = False,
    ) -> "ExtractionRequest":
        """Build a request with an absolute file path and a parsed format."""
        return cls(
            file_path=resolve_path(file_path),
            output_dir=resolve_path(output_dir) if output_dir else None,
            image_format=ImageFormat.parse(image_format),
            dpi=dpi,
            inline=inline,
        )

    @property
    def scale(self) -> float:
        # PDF user space is 72 units per inch.
        return self.dpi / 72

    @property
    def target_dir(self) -> Path:
        return self.output_dir or self.file_path.parent


@dataclass(frozen=True, slots=True)
class PageText:
    page_number: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"page_number": self.page_number, "text": self.text}


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """Document info dictionary fields; None when absent."""

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[str] = None
    modification_date: Optional[str] = None

    @classmethod
    def empty(cls) -> "DocumentMetadata":
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "subject": self.subject,
            "creator": self.creator,
            "producer": self.producer,
            "creation_date": self.creation_date,
            "modification_date": self.modification_date,
        }


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Rectangle in page space (points), top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_rect(cls, rect) -> "BoundingBox":
        x0, y0, x1, y1 = (float(v) for v in rect)
        return cls(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.width, "h": self.height}


@dataclass(frozen=True, slots=True)
class DiskImage:
    """Artifact written to a file."""

    path: Path


@dataclass(frozen=True, slots=True)
class InlineImage:
    """Artifact returned as base64 text instead of being written."""

    data: str
    mime_type: str


ImageOutput = Union[DiskImage, InlineImage]


@dataclass(frozen=True, slots=True)
class ImageArtifact:
    """One rendered page or embedded image.

    image_index is 0 for the full page render and 1..N for embedded images in
    page order.
    """

    page_number: int
    image_index: int
    width: int
    height: int
    image_format: ImageFormat
    kind: ImageKind
    output: ImageOutput
    bbox: Optional[BoundingBox] = None

    @property
    def path(self) -> Optional[Path]:
        return self.output.path if isinstance(self.output, DiskImage) else None

    @property
    def base64(self) -> Optional[str]:
        return self.output.data if isinstance(self.output, InlineImage) else None

    @property
    def mime_type(self) -> Optional[str]:
        return self.output.mime_type if isinstance(self.output, InlineImage) else None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "page_number": self.page_number,
            "image_index": self.image_index,
            "width": self.width,
            "height": self.height,
            "format": self.image_format.value,
            "kind": self.kind.value,
        }
        if self.bbox is not None:
            out["bbox"] = self.bbox.to_dict()
        if isinstance(self.output, InlineImage):
            out["base64"] = self.output.data
            out["mime_type"] = self.output.mime_type
        else:
            out["path"] = str(self.output.path)
        return out


@dataclass(frozen=True, slots=True)
class TextExtractionResult:
    file: str
    total_pages: int
    metadata: DocumentMetadata
    pages: list[PageText]
    metadata_available: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "total_pages": self.total_pages,
            "metadata": self.metadata.to_dict(),
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass(frozen=True, slots=True)
class ImageExtractionResult:
    file: str
    total_pages: int
    images: list[ImageArtifact]

    @property
    def total_images(self) -> int:
        return len(self.images)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "total_pages": self.total_pages,
            "total_images": self.total_images,
            "images": [image.to_dict() for image in self.images],
        }


@dataclass(frozen=True, slots=True)
class PageContent:
    page_number: int
    text: str
    images: list[ImageArtifact] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_number": self.page_number,
            "text": self.text,
            "images": [image.to_dict() for image in self.images],
        }


@dataclass(frozen=True, slots=True)
class CombinedResult:
    file: str
    total_pages: int
    metadata: DocumentMetadata
    total_images: int
    pages: list[PageContent]

    @property
    def images(self) -> list[ImageArtifact]:
        return [image for page in self.pages for image in page.images]

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "total_pages": self.total_pages,
            "metadata": self.metadata.to_dict(),
            "total_images": self.total_images,
            "pages": [page.to_dict() for page in self.pages],
        }
