"""
Basic usage example for SlideFetch.

This example shows how to download selected slides of a SlideShare
presentation as a PDF using the Python API.
"""

import asyncio
from pathlib import Path

import httpx

from slidefetch import GenerationRequest, SlideFetchPipeline
from slidefetch.storage import StorageContext


async def main():
    storage = StorageContext(
        temp_dir=Path("output/tmp"),
        downloads_dir=Path("output"),
    ).ensure()

    async with httpx.AsyncClient() as client:
        pipeline = SlideFetchPipeline(client, storage)

        # Read slide count and image locations from the page
        details = await pipeline.locate("https://www.slideshare.net/someone/some-deck")
        print(f"Found {details.total_slides} slides")

        # First three slides, full resolution, as a PDF
        request = GenerationRequest.build(
            details.slideshow_info,
            resolution_key="2048",
            output_format="pdf",
            selected_indices=[0, 1, 2],
        )
        artifact = await pipeline.generate(request)

    print("\n✓ Download complete!")
    print(f"  File: {artifact.path}")
    print(f"  Slides: {artifact.image_count}")


if __name__ == "__main__":
    asyncio.run(main())
