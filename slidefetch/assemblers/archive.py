"""
ZIP archive assembler.
"""

import logging
import zipfile
from pathlib import Path
from typing import List

from slidefetch.assemblers.base import BaseAssembler
from slidefetch.models import FetchedImage

logger = logging.getLogger(__name__)


def entry_name(image: FetchedImage) -> str:
    """Archive entry name; zero padding keeps name order equal to slide order."""
    return f"slide_{image.position + 1:03d}.{image.extension}"


class ArchiveAssembler(BaseAssembler):
    """Each image becomes one standalone entry, in input order."""

    def write(self, images: List[FetchedImage], output_path: Path) -> None:
        with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for image in images:
                archive.writestr(entry_name(image), image.data)

        logger.info(f"[ZIP] Saved {len(images)} images to {output_path.name}")
