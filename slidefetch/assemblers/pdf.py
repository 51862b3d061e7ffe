"""
Multi-page PDF assembler using PyMuPDF.

Pages take the pixel size of their own image (one pixel per point), so a deck
with mixed image sizes yields mixed page sizes.
"""

import logging
from pathlib import Path
from typing import List

import fitz  # PyMuPDF

from slidefetch.assemblers.base import BaseAssembler
from slidefetch.models import FetchedImage

logger = logging.getLogger(__name__)


class PDFAssembler(BaseAssembler):
    """One page per image, image drawn at the origin covering the page."""

    def write(self, images: List[FetchedImage], output_path: Path) -> None:
        doc = fitz.open()
        try:
            for image in images:
                page = doc.new_page(width=image.width, height=image.height)
                page.insert_image(page.rect, stream=image.data, keep_proportion=False)
                logger.debug(f"[PDF] Page {doc.page_count}: {image.width}x{image.height}")

            doc.save(str(output_path), deflate=True)
        finally:
            doc.close()

        logger.info(f"[PDF] Saved {len(images)} pages to {output_path.name}")
