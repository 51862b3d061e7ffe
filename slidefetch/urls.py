"""
Image URL construction for hosted slideshow assets.
"""

from typing import List

from slidefetch.models import ResolutionPreset, SlideshowMetadata


def build_image_url(
    host: str,
    image_location: str,
    image_title: str,
    quality: int,
    width: int,
    slide_number: int,
) -> str:
    """
    Build the URL of one slide image.

    ``slide_number`` is 1-based. Inputs are not validated.
    """
    return f"{host}/{image_location}/{quality}/{image_title}-{slide_number}-{width}.jpg"


def image_url_for(metadata: SlideshowMetadata, preset: ResolutionPreset, slide_number: int) -> str:
    return build_image_url(
        metadata.host,
        metadata.image_location,
        metadata.image_title,
        preset.quality,
        preset.width,
        slide_number,
    )


def selection_urls(
    metadata: SlideshowMetadata, preset: ResolutionPreset, selected_indices: List[int]
) -> List[str]:
    """URLs for 0-based selection indices, in selection order."""
    return [image_url_for(metadata, preset, index + 1) for index in selected_indices]
