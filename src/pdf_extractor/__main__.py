#!/usr/bin/env python3
"""
Entry point for the PDF Extractor.

Run with:
  uvx python -m pdf_extractor text document.pdf
  uvx python -m pdf_extractor serve
"""

from .cli import main


if __name__ == "__main__":
    main()
