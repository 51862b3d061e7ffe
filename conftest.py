"""
Shared pytest fixtures: a fake slide host served through httpx.MockTransport
and helpers for building images and slideshow pages.
"""

import json
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from PIL import Image

HOST = "https://cdn.example.com"
IMAGE_LOCATION = "my-deck-123/95"
IMAGE_TITLE = "my-deck"
PAGE_URL = "https://www.slideshare.net/someone/my-deck"


def make_image(
    width: int = 64,
    height: int = 48,
    fmt: str = "JPEG",
    color: Tuple[int, ...] = (200, 30, 30),
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-color image."""
    output = BytesIO()
    Image.new(mode, (width, height), color).save(output, format=fmt)
    return output.getvalue()


def slideshow_page(
    total_slides: int = 3,
    host: str = HOST,
    image_location: str = IMAGE_LOCATION,
    title: str = IMAGE_TITLE,
) -> str:
    """HTML page carrying a __NEXT_DATA__ payload like the real site."""
    payload = {
        "props": {
            "pageProps": {
                "slideshow": {
                    "totalSlides": total_slides,
                    "slides": {
                        "host": host,
                        "imageLocation": image_location,
                        "title": title,
                    },
                }
            }
        }
    }
    return (
        "<html><head><title>deck</title></head><body>"
        "<div id='__next'></div>"
        f"<script id=\"__NEXT_DATA__\" type=\"application/json\">{json.dumps(payload)}</script>"
        "</body></html>"
    )


def slide_number_from_url(url: str) -> int:
    # .../<title>-<number>-<width>.jpg
    return int(url.rsplit("-", 2)[-2])


def slide_size(number: int) -> Tuple[int, int]:
    """Every slide has a distinct size so order can be checked after assembly."""
    return 40 + number, 30 + number


class FakeSlideHost:
    """
    Serves slideshow pages and slide images.

    ``failures`` maps a URL to how many 503 responses it returns before
    succeeding; -1 means it never succeeds.
    """

    def __init__(
        self,
        page_html: Optional[str] = None,
        failures: Optional[Dict[str, int]] = None,
        image_format: str = "JPEG",
    ):
        self.page_html = page_html
        self.failures = dict(failures or {})
        self.image_format = image_format
        self.requests: List[str] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)

        remaining = self.failures.get(url, 0)
        if remaining != 0:
            if remaining > 0:
                self.failures[url] = remaining - 1
            return httpx.Response(503, text="busy")

        if url.endswith(".jpg"):
            width, height = slide_size(slide_number_from_url(url))
            return httpx.Response(
                200,
                content=make_image(width, height, fmt=self.image_format),
                headers={"Content-Type": "image/jpeg"},
            )

        if self.page_html is not None:
            return httpx.Response(200, text=self.page_html, headers={"Content-Type": "text/html"})

        return httpx.Response(404, text="not found")

    @property
    def image_requests(self) -> List[str]:
        return [url for url in self.requests if url.endswith(".jpg")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def fake_host():
    return FakeSlideHost(page_html=slideshow_page())


@pytest.fixture
def metadata_dict():
    return {
        "host": HOST,
        "imageLocation": IMAGE_LOCATION,
        "imageTitle": IMAGE_TITLE,
        "totalSlides": 3,
    }
