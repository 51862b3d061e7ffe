"""
Image acquisition: bounded-concurrency download plus forced normalization.
"""

from slidefetch.fetchers.image_fetcher import ImageFetcher
from slidefetch.fetchers.normalize import normalize_image

__all__ = ["ImageFetcher", "normalize_image"]
