"""
SlideFetch: download hosted slideshow images and repackage them.

Fetches slide images from a presentation-hosting site with bounded
concurrency and retries, normalizes them, and assembles the selection into a
PDF, a PPTX deck, or a ZIP of images.
"""

__version__ = "0.1.0"
__author__ = "SlideFetch Team"

from slidefetch.models import (
    Artifact,
    FetchedImage,
    GenerationRequest,
    OutputFormat,
    RESOLUTION_PRESETS,
    SlideshowDetails,
    SlideshowMetadata,
)
from slidefetch.pipeline import SlideFetchPipeline

__all__ = [
    "Artifact",
    "FetchedImage",
    "GenerationRequest",
    "OutputFormat",
    "RESOLUTION_PRESETS",
    "SlideshowDetails",
    "SlideshowMetadata",
    "SlideFetchPipeline",
]
