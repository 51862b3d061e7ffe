"""
Generation orchestration for SlideFetch.

Turns a validated GenerationRequest into a finished artifact in the downloads
directory: build URLs, fetch and normalize, assemble, publish.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import httpx

from slidefetch.assemblers import BaseAssembler, get_assembler
from slidefetch.errors import AssemblyError, SlideFetchError
from slidefetch.fetchers import ImageFetcher
from slidefetch.locator import SlideLocator
from slidefetch.models import Artifact, FetchedImage, GenerationRequest, SlideshowDetails
from slidefetch.retry import RetryPolicy
from slidefetch.storage import StorageContext, new_token
from slidefetch.urls import selection_urls

logger = logging.getLogger(__name__)


class SlideFetchPipeline:
    """
    End-to-end pipeline from slideshow page to downloadable artifact.

    Pipeline stages:
    1. Locate: read slideshow metadata from the presentation page
    2. Build URLs for the selected slides at the chosen resolution
    3. Fetch and normalize the images (bounded concurrency, retries)
    4. Assemble the ZIP, PDF, or PPTX into the temp directory
    5. Publish the finished file into the downloads directory
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        storage: StorageContext,
        retry_policy: Optional[RetryPolicy] = None,
        max_concurrency: int = 20,
        timeout: float = 30.0,
    ):
        """
        Initialize pipeline.

        Args:
            http_client: Shared async HTTP client
            storage: Temp and downloads roots
            retry_policy: Retry behaviour for each image fetch
            max_concurrency: Max image fetches in flight per request
            timeout: Per-attempt timeout in seconds
        """
        self.storage = storage
        self.locator = SlideLocator(http_client, timeout=timeout)
        self.fetcher = ImageFetcher(
            http_client,
            retry_policy=retry_policy,
            max_concurrency=max_concurrency,
            timeout=timeout,
        )

    async def locate(self, url: str) -> SlideshowDetails:
        return await self.locator.locate(url)

    async def _assemble(
        self, assembler: BaseAssembler, images: List[FetchedImage], part_path: Path
    ) -> None:
        """Write the artifact in a worker thread so the event loop keeps serving."""
        work = asyncio.ensure_future(asyncio.to_thread(assembler.assemble, images, part_path))
        try:
            await asyncio.shield(work)
        except asyncio.CancelledError:
            # The writer thread cannot be interrupted; let it finish before cleanup
            await asyncio.gather(work, return_exceptions=True)
            raise

    async def generate(self, request: GenerationRequest) -> Artifact:
        """
        Build the artifact described by ``request``.

        On failure every temp file of this request is removed before the
        error propagates; nothing is left in the downloads directory.

        Returns:
            Artifact describing the published file
        """
        # Resolve the assembler first so an unknown format fails before any I/O
        assembler = get_assembler(request.output_format)

        token = new_token()
        filename = self.storage.artifact_filename(token, request.output_format.extension)
        part_path = self.storage.part_path(token, filename)
        urls = selection_urls(request.metadata, request.preset, request.selected_indices)

        logger.info(
            f"[Pipeline] Generating {filename}: {len(urls)} slides, "
            f"resolution={request.resolution_key}, format={request.output_format.value}"
        )

        try:
            images = await self.fetcher.fetch_all(urls, request.raster_format)

            try:
                await self._assemble(assembler, images, part_path)
            except SlideFetchError:
                raise
            except Exception as e:
                raise AssemblyError(f"Failed to build {request.output_format.value} file: {e}")

            final_path = self.storage.publish(part_path, filename)
        except BaseException:
            removed = self.storage.purge_request(token)
            logger.error(
                f"[Pipeline] Generation of {filename} failed; removed {removed} temp file(s)"
            )
            raise

        artifact = Artifact(
            filename=filename,
            path=final_path,
            output_format=request.output_format,
            image_count=len(images),
            size_bytes=final_path.stat().st_size,
        )
        logger.info(
            f"[Pipeline] ✓ {filename} ready ({artifact.image_count} images, "
            f"{artifact.size_bytes//1024}KB)"
        )
        return artifact
