"""
PPTX assembler using python-pptx.

Builds a deck with one full-bleed picture per slide. The pictures are embedded
in the package, so the deck has no external references.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import List

from pptx import Presentation
from pptx.util import Inches

from slidefetch.assemblers.base import BaseAssembler
from slidefetch.models import FetchedImage

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6

# PowerPoint rejects slide dimensions outside 1" to 56"
MIN_SLIDE_INCHES = 1.0
MAX_SLIDE_INCHES = 56.0


class PPTXAssembler(BaseAssembler):
    """One slide per image, picture filling the whole slide."""

    def __init__(self, slide_height_inches: float = 7.5):
        self.slide_height_inches = slide_height_inches

    def write(self, images: List[FetchedImage], output_path: Path) -> None:
        prs = Presentation()

        # Slide aspect ratio follows the first image
        first = images[0]
        aspect_ratio = first.width / first.height if first.height else 16 / 9
        slide_width_inches = self.slide_height_inches * aspect_ratio
        slide_width_inches = min(max(slide_width_inches, MIN_SLIDE_INCHES), MAX_SLIDE_INCHES)
        prs.slide_width = Inches(slide_width_inches)
        prs.slide_height = Inches(self.slide_height_inches)

        logger.debug(
            f"[PPTX] Slide dimensions: {slide_width_inches:.2f}\" x {self.slide_height_inches:.2f}\" "
            f"(from {first.width}x{first.height}px)"
        )

        layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]
        for image in images:
            slide = prs.slides.add_slide(layout)
            slide.shapes.add_picture(
                BytesIO(image.data),
                0,
                0,
                width=prs.slide_width,
                height=prs.slide_height,
            )

        prs.save(str(output_path))
        logger.info(f"[PPTX] Saved {len(images)} slides to {output_path.name}")
