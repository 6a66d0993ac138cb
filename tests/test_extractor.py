import asyncio
import base64
import io
from pathlib import Path

import fitz
import pytest
from PIL import Image
from pypdf import PdfWriter

from pdf_extractor import extractor as extractor_module
from pdf_extractor.config import ExtractorConfig
from pdf_extractor.errors import DocumentOpenError, InvalidArgumentError, PDFFileNotFoundError
from pdf_extractor.extractor import PDFExtractor
from pdf_extractor.models import ImageFormat, ImageKind


def _png_bytes(width: int = 40, height: int = 20) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def _create_pdf(path: Path, texts=("Hello",), metadata=None, width=612, height=792, with_image=False) -> None:
    doc = fitz.open()
    for text in texts:
        page = doc.new_page(width=width, height=height)
        if text:
            page.insert_text((72, 72), text)
        if with_image:
            page.insert_image(fitz.Rect(100, 100, 200, 150), stream=_png_bytes())
    if metadata:
        doc.set_metadata(metadata)
    doc.save(str(path))
    doc.close()


class _EmptyDocument:
    def __len__(self):
        return 0

    def __iter__(self):
        return iter(())

    def close(self):
        pass


def test_extract_text_three_pages_with_metadata(tmp_path):
    pdf_path = tmp_path / "doc.pdf"
    _create_pdf(
        pdf_path,
        texts=("First page", "Second page", "Third page"),
        metadata={"title": "My Document", "author": "John Doe"},
    )

    result = asyncio.run(PDFExtractor().extract_text(str(pdf_path)))

    assert result.file == str(pdf_path.resolve())
    assert result.total_pages == 3
    assert result.metadata.title == "My Document"
    assert result.metadata.author == "John Doe"
    assert result.metadata_available is True
    assert [p.page_number for p in result.pages] == [1, 2, 3]
    assert result.pages[0].text == "First page"
    assert result.pages[2].text == "Third page"


def test_extract_text_blank_page_is_empty_string(tmp_path):
    pdf_path = tmp_path / "blank.pdf"
    _create_pdf(pdf_path, texts=("",))

    result = asyncio.run(PDFExtractor().extract_text(pdf_path))
    assert result.pages[0].text == ""


def test_missing_file_fails_before_any_adapter_call(tmp_path):
    def must_not_open(data):
        raise AssertionError("adapter called")

    def must_not_read(data):
        raise AssertionError("metadata adapter called")

    extractor = PDFExtractor(open_document=must_not_open, read_metadata=must_not_read)
    missing = tmp_path / "nope.pdf"

    with pytest.raises(PDFFileNotFoundError) as exc:
        asyncio.run(extractor.extract_text(str(missing)))
    assert "PDF file not found" in str(exc.value)

    with pytest.raises(PDFFileNotFoundError):
        asyncio.run(extractor.extract_images(str(missing), inline=True))


def test_non_pdf_bytes_raise_document_open_error(tmp_path):
    bogus = tmp_path / "notes.pdf"
    bogus.write_text("this is not a pdf", encoding="utf-8")

    with pytest.raises(DocumentOpenError):
        asyncio.run(PDFExtractor().extract_text(bogus))


def test_metadata_failure_is_not_fatal(tmp_path):
    pdf_path = tmp_path / "doc.pdf"
    _create_pdf(pdf_path, texts=("Body",), metadata={"title": "Ignored"})

    extractor = PDFExtractor(read_metadata=lambda data: None)
    result = asyncio.run(extractor.extract_text(pdf_path))

    assert result.metadata_available is False
    assert result.metadata.to_dict() == {
        "title": None,
        "author": None,
        "subject": None,
        "creator": None,
        "producer": None,
        "creation_date": None,
        "modification_date": None,
    }
    assert result.pages[0].text == "Body"


def test_zero_page_document_is_not_an_error(tmp_path):
    pdf_path = tmp_path / "empty.pdf"
    pdf_path.write_bytes(b"%PDF-1.7\n")

    extractor = PDFExtractor(open_document=lambda data: _EmptyDocument(), read_metadata=lambda data: None)

    text = asyncio.run(extractor.extract_text(pdf_path))
    assert text.total_pages == 0
    assert text.pages == []

    images = asyncio.run(extractor.extract_images(pdf_path, inline=True))
    assert images.total_pages == 0
    assert images.total_images == 0


def test_real_zero_page_pdf(tmp_path):
    pdf_path = tmp_path / "empty.pdf"
    with pdf_path.open("wb") as f:
        PdfWriter().write(f)

    text = asyncio.run(PDFExtractor().extract_text(pdf_path))
    assert (text.total_pages, text.pages) == (0, [])

    images = asyncio.run(PDFExtractor().extract_images(pdf_path, inline=True))
    assert (images.total_pages, images.images) == (0, [])


def test_page_render_dimensions_at_300_dpi_inline_jpeg(tmp_path):
    pdf_path = tmp_path / "letter.pdf"
    _create_pdf(pdf_path, texts=("Letter",))

    result = asyncio.run(
        PDFExtractor().extract_images(pdf_path, image_format="jpeg", inline=True, dpi=300)
    )

    assert result.total_pages == 1
    render = result.images[0]
    assert render.kind is ImageKind.PAGE_RENDER
    assert render.image_index == 0
    assert (render.width, render.height) == (round(612 * 300 / 72), round(792 * 300 / 72))
    assert render.mime_type == "image/jpeg"
    assert render.path is None
    assert "path" not in render.to_dict()

    decoded = Image.open(io.BytesIO(base64.b64decode(render.base64)))
    assert decoded.format == "JPEG"
    assert decoded.size == (render.width, render.height)

    # Nothing written in inline mode
    assert list(tmp_path.iterdir()) == [pdf_path]


def test_disk_mode_writes_named_files_and_creates_output_dir(tmp_path):
    pdf_path = tmp_path / "report.pdf"
    _create_pdf(pdf_path, texts=("One", "Two"), width=72, height=72)
    out_dir = tmp_path / "nested" / "images"

    result = asyncio.run(PDFExtractor().extract_images(pdf_path, output_dir=out_dir, dpi=72))

    assert [img.path for img in result.images] == [
        out_dir.resolve() / "report_page_1.png",
        out_dir.resolve() / "report_page_2.png",
    ]
    for img in result.images:
        assert img.path.exists()
        assert img.base64 is None
        with Image.open(img.path) as decoded:
            assert decoded.size == (72, 72)


def test_default_output_dir_is_pdf_directory_and_jpeg_uses_jpg_extension(tmp_path):
    pdf_path = tmp_path / "slides.pdf"
    _create_pdf(pdf_path, texts=("x",), width=72, height=72)

    result = asyncio.run(PDFExtractor().extract_images(pdf_path, image_format=ImageFormat.JPEG, dpi=72))

    assert result.images[0].path == tmp_path.resolve() / "slides_page_1.jpg"
    assert result.images[0].path.exists()


def test_embedded_images_follow_page_render(tmp_path):
    pdf_path = tmp_path / "figure.pdf"
    _create_pdf(pdf_path, texts=("Figure 1",), with_image=True)

    result = asyncio.run(PDFExtractor().extract_images(pdf_path, dpi=72))

    assert [(img.page_number, img.image_index) for img in result.images] == [(1, 0), (1, 1)]
    embedded = result.images[1]
    assert embedded.kind is ImageKind.EMBEDDED
    assert (embedded.width, embedded.height) == (40, 20)
    assert embedded.path == tmp_path.resolve() / "figure_page_1_img_1.png"
    assert embedded.path.exists()
    assert embedded.bbox.x == pytest.approx(100, abs=1)
    assert embedded.bbox.y == pytest.approx(100, abs=1)
    assert embedded.bbox.width == pytest.approx(100, abs=1)
    assert embedded.bbox.height == pytest.approx(50, abs=1)
    assert result.images[0].bbox is None


def test_embedded_image_failure_is_skipped(tmp_path, monkeypatch):
    pdf_path = tmp_path / "figure.pdf"
    _create_pdf(pdf_path, texts=("a", "b"), with_image=True, width=300, height=300)

    def broken(image_bytes):
        raise RuntimeError("corrupt image stream")

    monkeypatch.setattr(extractor_module, "decode_image", broken)
    result = asyncio.run(PDFExtractor().extract_images(pdf_path, inline=True, dpi=72))

    assert [(img.page_number, img.kind) for img in result.images] == [
        (1, ImageKind.PAGE_RENDER),
        (2, ImageKind.PAGE_RENDER),
    ]


def test_one_bad_embedded_image_does_not_stop_the_rest(tmp_path, monkeypatch):
    pdf_path = tmp_path / "two.pdf"
    doc = fitz.open()
    page = doc.new_page(width=300, height=300)
    page.insert_image(fitz.Rect(20, 20, 120, 70), stream=_png_bytes(40, 20))
    page.insert_image(fitz.Rect(150, 150, 250, 250), stream=_png_bytes(30, 30))
    doc.save(str(pdf_path))
    doc.close()

    real_decode = extractor_module.decode_image
    calls = []

    def fail_first(image_bytes):
        calls.append(image_bytes)
        if len(calls) == 1:
            raise RuntimeError("corrupt image stream")
        return real_decode(image_bytes)

    monkeypatch.setattr(extractor_module, "decode_image", fail_first)
    out_dir = tmp_path / "out"
    result = asyncio.run(PDFExtractor().extract_images(pdf_path, output_dir=out_dir, dpi=72))

    assert len(calls) == 2
    assert [(img.kind, img.image_index) for img in result.images] == [
        (ImageKind.PAGE_RENDER, 0),
        (ImageKind.EMBEDDED, 1),
    ]
    assert sorted(p.name for p in out_dir.iterdir()) == ["two_page_1.png", "two_page_1_img_1.png"]


def test_repeated_extraction_is_stable(tmp_path):
    pdf_path = tmp_path / "doc.pdf"
    _create_pdf(pdf_path, texts=("Same",), with_image=True, width=200, height=200)
    out_dir = tmp_path / "out"

    first = asyncio.run(PDFExtractor().extract_images(pdf_path, output_dir=out_dir, dpi=100))
    second = asyncio.run(PDFExtractor().extract_images(pdf_path, output_dir=out_dir, dpi=100))

    assert [(i.width, i.height, i.image_format, i.path) for i in first.images] == [
        (i.width, i.height, i.image_format, i.path) for i in second.images
    ]


def test_invalid_dpi_and_format_are_rejected(tmp_path):
    pdf_path = tmp_path / "doc.pdf"
    _create_pdf(pdf_path)
    extractor = PDFExtractor(ExtractorConfig(max_dpi=600))

    with pytest.raises(InvalidArgumentError):
        asyncio.run(extractor.extract_images(pdf_path, dpi=0))
    with pytest.raises(InvalidArgumentError):
        asyncio.run(extractor.extract_images(pdf_path, dpi=601))
    with pytest.raises(InvalidArgumentError):
        asyncio.run(extractor.extract_images(pdf_path, image_format="gif"))


def test_extract_all_groups_images_by_page(tmp_path):
    pdf_path = tmp_path / "combined.pdf"
    _create_pdf(
        pdf_path,
        texts=("Alpha", "Beta"),
        metadata={"title": "Combined"},
        with_image=True,
        width=300,
        height=300,
    )

    result = asyncio.run(PDFExtractor().extract_all(pdf_path, inline=True, dpi=72))

    assert result.total_pages == 2
    assert result.metadata.title == "Combined"
    assert result.total_images == 4
    assert [p.text for p in result.pages] == ["Alpha", "Beta"]
    for page in result.pages:
        assert [img.page_number for img in page.images] == [page.page_number] * 2
        assert [img.image_index for img in page.images] == [0, 1]
        assert all(img.base64 for img in page.images)


def test_extract_all_fails_without_partial_result(tmp_path):
    with pytest.raises(PDFFileNotFoundError):
        asyncio.run(PDFExtractor().extract_all(tmp_path / "missing.pdf"))


def test_extract_all_cancels_text_when_images_fail(tmp_path):
    events = []

    class SlowTextExtractor(PDFExtractor):
        async def extract_text(self, file_path):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                events.append("text cancelled")
                raise

    async def run():
        with pytest.raises(InvalidArgumentError):
            await SlowTextExtractor().extract_all(tmp_path / "doc.pdf", dpi=0)
        return list(events)

    assert asyncio.run(run()) == ["text cancelled"]
