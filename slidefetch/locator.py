"""
Slide Locator.

Reads a presentation page, finds the ``__NEXT_DATA__`` script the site embeds,
and pulls slideshow metadata out of its JSON payload.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from slidefetch.errors import NotFoundError, UpstreamError, ValidationError
from slidefetch.models import (
    PREVIEW_RESOLUTION,
    RESOLUTION_PRESETS,
    SlideshowDetails,
    SlideshowMetadata,
)
from slidefetch.urls import image_url_for

logger = logging.getLogger(__name__)

NEXT_DATA_SCRIPT_ID = "__NEXT_DATA__"

# Page requests look like a regular browser visit
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def extract_next_data(html: str) -> Dict[str, Any]:
    """
    Find and parse the embedded ``__NEXT_DATA__`` JSON.

    Raises:
        NotFoundError: If the script tag is absent
        UpstreamError: If its contents are not valid JSON
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id=NEXT_DATA_SCRIPT_ID)
    if script is None:
        raise NotFoundError(
            f"Could not find {NEXT_DATA_SCRIPT_ID} script tag in the SlideShare page."
        )

    try:
        payload = json.loads(script.string or "")
    except json.JSONDecodeError as e:
        raise UpstreamError(f"Could not parse {NEXT_DATA_SCRIPT_ID} JSON: {e}")

    if not isinstance(payload, dict):
        raise UpstreamError(f"Unexpected {NEXT_DATA_SCRIPT_ID} payload type: {type(payload).__name__}")
    return payload


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def metadata_from_next_data(payload: Dict[str, Any]) -> SlideshowMetadata:
    """Read ``props.pageProps.slideshow``; absent fields become empty/zero."""
    props = _mapping(_mapping(payload.get("props")).get("pageProps"))
    slideshow = _mapping(props.get("slideshow"))
    slides = _mapping(slideshow.get("slides"))

    total_slides = slideshow.get("totalSlides") or 0
    try:
        total_slides = max(int(total_slides), 0)
    except (TypeError, ValueError):
        raise UpstreamError(f"Unexpected totalSlides value: {total_slides!r}")

    return SlideshowMetadata(
        host=slides.get("host") or "",
        image_location=slides.get("imageLocation") or "",
        image_title=slides.get("title") or "",
        total_slides=total_slides,
    )


def preview_urls(metadata: SlideshowMetadata) -> List[str]:
    """Low-resolution preview URL for every slide, 1 through total_slides."""
    preset = RESOLUTION_PRESETS[PREVIEW_RESOLUTION]
    return [
        image_url_for(metadata, preset, number)
        for number in range(1, metadata.total_slides + 1)
    ]


class SlideLocator:
    """
    Locate slideshow metadata on a presentation page.

    Usage:
        async with httpx.AsyncClient() as client:
            details = await SlideLocator(client).locate(url)
    """

    def __init__(self, http_client: httpx.AsyncClient, timeout: Optional[float] = 30.0):
        self.http_client = http_client
        self.timeout = timeout

    async def fetch_page(self, url: str) -> str:
        try:
            response = await self.http_client.get(
                url, headers=BROWSER_HEADERS, timeout=self.timeout, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Presentation page returned HTTP {e.response.status_code}: {url}"
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Could not fetch presentation page {url}: {e}")
        return response.text

    async def locate(self, url: str) -> SlideshowDetails:
        """
        Fetch ``url`` and extract its slideshow metadata and preview URLs.

        Raises:
            ValidationError: If ``url`` is empty
            NotFoundError: If the page carries no embedded slideshow data
            UpstreamError: If the page cannot be fetched or parsed
        """
        if not url or not url.strip():
            raise ValidationError("No SlideShare URL provided.")

        url = url.strip()
        logger.info(f"[Locator] Fetching page: {url[:80]}")
        html = await self.fetch_page(url)

        metadata = metadata_from_next_data(extract_next_data(html))
        previews = preview_urls(metadata)

        logger.info(
            f"[Locator] Found '{metadata.image_title}' with {metadata.total_slides} slides"
        )
        return SlideshowDetails(
            total_slides=metadata.total_slides,
            slide_images_preview=previews,
            slideshow_info=metadata,
        )
