"""PDF Extractor MCP Server.

Extracts text and images from PDF files for AI agents, through a command-line
interface and a Model Context Protocol server speaking over stdio.

Features:
- Page-by-page text extraction with document metadata
- Full-page renders at a configurable DPI (PNG or JPEG)
- Embedded image extraction with bounding boxes
- Images written to disk or returned inline as base64

Run with: uvx python -m pdf_extractor serve
"""

__version__ = "1.0.0"
__author__ = "MCP Generator"
