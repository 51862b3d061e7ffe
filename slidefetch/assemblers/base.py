"""
Base assembler interface.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from slidefetch.errors import ValidationError
from slidefetch.models import FetchedImage


class BaseAssembler(ABC):
    """Abstract base class for artifact writers."""

    def assemble(self, images: List[FetchedImage], output_path: Path) -> Path:
        """
        Combine normalized images into one artifact file.

        Args:
            images: Normalized images in the order they should appear
            output_path: Where to write the artifact

        Returns:
            Path to the written artifact
        """
        if not images:
            raise ValidationError("No images to assemble.")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.write(images, output_path)
        return output_path

    @abstractmethod
    def write(self, images: List[FetchedImage], output_path: Path) -> None:
        """Write the artifact bytes for a non-empty image list."""
        pass
