"""
PDF extraction tools for MCP server.

Implements tool adapters that wrap the extraction core with argument
validation, error handling, and MCP content blocks.
"""

from typing import Any, Awaitable, Callable, Dict, List, Union
import logging

from mcp.types import CallToolResult, ImageContent, TextContent

from .config import DEFAULT_DPI
from .errors import InvalidArgumentError, error_result, error_text, exception_result
from .extractor import PDFExtractor
from .formatting import format_all_summary, format_images_report, format_page_block, format_text_report
from .models import ImageArtifact, ImageFormat

logger = logging.getLogger(__name__)

ContentBlock = Union[TextContent, ImageContent]

_FORMAT_SCHEMA = {
    "type": "string",
    "enum": [f.value for f in ImageFormat],
    "default": ImageFormat.PNG.value,
}

# Tool metadata for MCP registration
TOOL_METADATA = {
    "extract_pdf_text": {
        "description": (
            "Extract all text from a PDF file, organized page by page. "
            "Returns metadata (title, author, etc.) and text for each page. "
            "Use this when you need to read the text content of a PDF document."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "pdfPath": {
                    "type": "string",
                    "description": "Absolute path to the PDF file to extract text from"
                }
            },
            "required": ["pdfPath"]
        }
    },
    "extract_pdf_images": {
        "description": (
            "Extract images from a PDF file. Renders each page as an image and extracts embedded images. "
            "Returns images as base64-encoded data or saves them to disk. "
            "Use this when you need to see visual content (charts, diagrams, photos) in a PDF."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "pdfPath": {
                    "type": "string",
                    "description": "Absolute path to the PDF file to extract images from"
                },
                "outputDir": {
                    "type": "string",
                    "description": "Directory to save images to. Defaults to same directory as the PDF."
                },
                "format": {**_FORMAT_SCHEMA, "description": "Image format: png or jpeg"},
                "returnBase64": {
                    "type": "boolean",
                    "default": False,
                    "description": "If true, return base64-encoded images in the response instead of saving to disk"
                },
                "dpi": {
                    "type": "integer",
                    "default": DEFAULT_DPI,
                    "minimum": 1,
                    "description": "Resolution for rendering pages as images (default: 150 DPI)"
                }
            },
            "required": ["pdfPath"]
        }
    },
    "extract_pdf_all": {
        "description": (
            "Extract ALL content (text + images) from a PDF file. "
            "Returns text for each page along with associated images. "
            "Use this for a complete understanding of a PDF document."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "pdfPath": {
                    "type": "string",
                    "description": "Absolute path to the PDF file to extract from"
                },
                "outputDir": {
                    "type": "string",
                    "description": "Directory to save images to"
                },
                "format": {**_FORMAT_SCHEMA, "description": "Image format"},
                "dpi": {
                    "type": "integer",
                    "default": DEFAULT_DPI,
                    "minimum": 1,
                    "description": "Resolution for page images (default: 150 DPI)"
                }
            },
            "required": ["pdfPath"]
        }
    }
}


def _require_pdf_path(params: Dict[str, Any]) -> str:
    pdf_path = params.get("pdfPath")
    if not pdf_path or not isinstance(pdf_path, str):
        raise InvalidArgumentError("Parameter 'pdfPath' is required and must be a string")
    return pdf_path


def _optional_output_dir(params: Dict[str, Any]) -> Union[str, None]:
    output_dir = params.get("outputDir")
    if output_dir is not None and not isinstance(output_dir, str):
        raise InvalidArgumentError("Parameter 'outputDir' must be a string")
    return output_dir or None


def _image_format(params: Dict[str, Any]) -> ImageFormat:
    value = params.get("format", ImageFormat.PNG.value)
    if value is None:
        return ImageFormat.PNG
    if not isinstance(value, str):
        raise InvalidArgumentError("Parameter 'format' must be 'png' or 'jpeg'")
    return ImageFormat.parse(value)


def _dpi(params: Dict[str, Any], default_dpi: int) -> int:
    dpi = params.get("dpi", default_dpi)
    if dpi is None:
        return default_dpi
    # JSON clients may send 300.0 for an integer
    if isinstance(dpi, float) and dpi.is_integer():
        dpi = int(dpi)
    if isinstance(dpi, bool) or not isinstance(dpi, int) or dpi < 1:
        raise InvalidArgumentError("Parameter 'dpi' must be a positive integer")
    return dpi


def validate_text_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Validate parameters for extract_pdf_text tool."""
    return {"pdf_path": _require_pdf_path(params)}


def validate_images_params(params: Dict[str, Any], default_dpi: int = DEFAULT_DPI) -> Dict[str, Any]:
    """Validate parameters for extract_pdf_images tool."""
    return_base64 = params.get("returnBase64", False)
    if return_base64 is None:
        return_base64 = False
    if not isinstance(return_base64, bool):
        raise InvalidArgumentError("Parameter 'returnBase64' must be a boolean")

    return {
        "pdf_path": _require_pdf_path(params),
        "output_dir": _optional_output_dir(params),
        "image_format": _image_format(params),
        "inline": return_base64,
        "dpi": _dpi(params, default_dpi),
    }


def validate_all_params(params: Dict[str, Any], default_dpi: int = DEFAULT_DPI) -> Dict[str, Any]:
    """Validate parameters for extract_pdf_all tool. Images are always inline."""
    return {
        "pdf_path": _require_pdf_path(params),
        "output_dir": _optional_output_dir(params),
        "image_format": _image_format(params),
        "inline": True,
        "dpi": _dpi(params, default_dpi),
    }


def _image_blocks(images: List[ImageArtifact]) -> List[ImageContent]:
    return [
        ImageContent(type="image", data=image.base64, mimeType=image.mime_type)
        for image in images
        if image.base64
    ]


async def tool_extract_pdf_text(extractor: PDFExtractor, params: Dict[str, Any]) -> CallToolResult:
    """
    Tool: Extract page-by-page text and document metadata.
    """
    try:
        validated = validate_text_params(params or {})
    except ValueError as e:
        return error_result(error_text(e))

    try:
        result = await extractor.extract_text(validated["pdf_path"])
    except Exception as e:  # pylint: disable=broad-exception-caught
        return exception_result(e)

    return CallToolResult(content=[TextContent(type="text", text=format_text_report(result))])


async def tool_extract_pdf_images(extractor: PDFExtractor, params: Dict[str, Any]) -> CallToolResult:
    """
    Tool: Render pages and extract embedded images, to disk or inline.
    """
    try:
        validated = validate_images_params(params or {}, extractor.config.default_dpi)
    except ValueError as e:
        return error_result(error_text(e))

    try:
        result = await extractor.extract_images(
            validated["pdf_path"],
            output_dir=validated["output_dir"],
            image_format=validated["image_format"],
            inline=validated["inline"],
            dpi=validated["dpi"],
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        return exception_result(e)

    content: List[ContentBlock] = [
        TextContent(type="text", text=format_images_report(result.file, result.total_pages, result.images))
    ]
    if validated["inline"]:
        content.extend(_image_blocks(result.images))
    return CallToolResult(content=content)


async def tool_extract_pdf_all(extractor: PDFExtractor, params: Dict[str, Any]) -> CallToolResult:
    """
    Tool: Extract text and inline images, grouped page by page.
    """
    try:
        validated = validate_all_params(params or {}, extractor.config.default_dpi)
    except ValueError as e:
        return error_result(error_text(e))

    try:
        result = await extractor.extract_all(
            validated["pdf_path"],
            output_dir=validated["output_dir"],
            image_format=validated["image_format"],
            inline=validated["inline"],
            dpi=validated["dpi"],
        )
    except Exception as e:  # pylint: disable=broad-exception-caught
        return exception_result(e)

    content: List[ContentBlock] = [TextContent(type="text", text=format_all_summary(result))]
    for page in result.pages:
        content.append(TextContent(type="text", text=format_page_block(page)))
        content.extend(_image_blocks(page.images))
    return CallToolResult(content=content)


ToolHandler = Callable[[PDFExtractor, Dict[str, Any]], Awaitable[CallToolResult]]

TOOL_HANDLERS: Dict[str, ToolHandler] = {
    "extract_pdf_text": tool_extract_pdf_text,
    "extract_pdf_images": tool_extract_pdf_images,
    "extract_pdf_all": tool_extract_pdf_all,
}


async def dispatch_tool(extractor: PDFExtractor, name: str, arguments: Dict[str, Any]) -> CallToolResult:
    """Run a tool by name; unknown names give an error result."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return error_result(
            f"Error: Unknown tool: {name}. Available tools: {', '.join(TOOL_METADATA.keys())}"
        )
    return await handler(extractor, arguments if isinstance(arguments, dict) else {})
