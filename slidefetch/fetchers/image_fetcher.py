"""
Fetch-and-normalize pipeline.

Downloads slide images with bounded concurrency, retries transient failures
through a RetryPolicy, and normalizes each image to a single raster format.
"""

import asyncio
import logging
from typing import List, Optional

import httpx

from slidefetch.models import FetchedImage
from slidefetch.retry import RetryPolicy
from slidefetch.fetchers.normalize import normalize_image

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 20

# Browser-like headers; some image CDNs reject bare clients
IMAGE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class ImageFetcher:
    """
    Downloads and normalizes a batch of slide images.

    Usage:
        fetcher = ImageFetcher(client)
        images = await fetcher.fetch_all(urls, "jpeg")
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        retry_policy: Optional[RetryPolicy] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout: float = 30.0,
        jpeg_quality: int = 95,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.http_client = http_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.jpeg_quality = jpeg_quality

    async def _get(self, url: str) -> bytes:
        """
        One attempt: non-2xx responses raise and count as failures.

        httpx timeouts apply per phase and per read, so a slowly trickling
        body is also capped by an overall deadline of ``timeout`` seconds.
        """
        try:
            response = await asyncio.wait_for(
                self.http_client.get(
                    url, headers=IMAGE_HEADERS, timeout=self.timeout, follow_redirects=True
                ),
                self.timeout,
            )
        except asyncio.TimeoutError:
            raise httpx.ReadTimeout(f"No complete response within {self.timeout}s: {url}")
        response.raise_for_status()
        return response.content

    async def fetch_one(
        self,
        url: str,
        position: int,
        raster_format: str,
        semaphore: asyncio.Semaphore,
    ) -> FetchedImage:
        """Fetch one URL (holding a concurrency slot) and normalize it."""
        async with semaphore:
            logger.debug(f"[Fetcher] Downloading #{position}: {url[:80]}")
            raw = await self.retry_policy.run(lambda: self._get(url), url)

        # Pillow decode/encode is CPU bound; keep it off the event loop
        data, width, height = await asyncio.to_thread(
            normalize_image, raw, raster_format, self.jpeg_quality
        )
        logger.debug(
            f"[Fetcher] #{position} ok: {len(raw)//1024}KB -> {len(data)//1024}KB "
            f"{raster_format} ({width}x{height})"
        )
        return FetchedImage(
            position=position,
            url=url,
            data=data,
            width=width,
            height=height,
            format=raster_format,
        )

    async def fetch_all(self, urls: List[str], raster_format: str) -> List[FetchedImage]:
        """
        Fetch every URL; result ``i`` always corresponds to ``urls[i]``.

        One permanent failure aborts the batch: the remaining fetches are
        cancelled and the error is raised. No partial results are returned.

        Args:
            urls: Image URLs in selection order
            raster_format: "jpeg" or "png"

        Returns:
            List of FetchedImage, same length and order as ``urls``
        """
        if not urls:
            return []

        logger.info(
            f"[Fetcher] Starting batch of {len(urls)} images "
            f"(max {self.max_concurrency} in flight, format={raster_format})"
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.create_task(self.fetch_one(url, position, raster_format, semaphore))
            for position, url in enumerate(urls)
        ]

        try:
            images = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        total = sum(len(img.data) for img in images)
        logger.info(f"[Fetcher] Batch complete: {len(images)} images, {total//1024}KB")
        return list(images)
