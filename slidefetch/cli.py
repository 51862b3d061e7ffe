"""
Command-line interface for SlideFetch.
"""

import argparse
import asyncio
import logging
import sys
import tempfile
from pathlib import Path
from typing import List

import httpx

from slidefetch import __version__
from slidefetch.config import Settings
from slidefetch.errors import SlideFetchError, ValidationError
from slidefetch.models import RESOLUTION_PRESETS, GenerationRequest, OutputFormat
from slidefetch.pipeline import SlideFetchPipeline
from slidefetch.storage import StorageContext


def parse_slide_selection(selection: str, total_slides: int) -> List[int]:
    """
    Turn a 1-based selection like "1,3-5" into 0-based indices, in order.

    An empty selection means every slide.
    """
    if not selection or not selection.strip():
        return list(range(total_slides))

    indices = []
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = (int(x) for x in part.split("-", 1))
                if start > end:
                    raise ValidationError(f"Invalid slide range: {part}")
                indices.extend(range(start - 1, end))
            else:
                indices.append(int(part) - 1)
        except ValueError:
            raise ValidationError(f"Invalid slide selection: {part}")

    if any(i < 0 for i in indices):
        raise ValidationError("Slide numbers start at 1")
    return indices


async def run(args: argparse.Namespace, settings: Settings) -> int:
    storage = StorageContext(
        temp_dir=Path(tempfile.gettempdir()) / "slidefetch",
        downloads_dir=args.output,
    ).ensure()

    async with httpx.AsyncClient() as client:
        pipeline = SlideFetchPipeline(
            client,
            storage,
            retry_policy=settings.retry_policy(),
            max_concurrency=settings.max_concurrent_fetches,
            timeout=settings.fetch_timeout,
        )

        details = await pipeline.locate(args.url)
        info = details.slideshow_info

        if args.list:
            print(f"{info.image_title or '(untitled)'}: {details.total_slides} slides")
            for number, url in enumerate(details.slide_images_preview, start=1):
                print(f"  {number:3d}  {url}")
            return 0

        indices = parse_slide_selection(args.slides, details.total_slides)
        request = GenerationRequest.build(
            info, args.resolution, args.format, indices
        )
        artifact = await pipeline.generate(request)

    print(f"\n✓ Saved {artifact.image_count} slides to {artifact.path}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(
        description="SlideFetch: download slides from a SlideShare presentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Whole deck as a PDF
  slidefetch https://www.slideshare.net/user/deck

  # Slides 1, 3, 4 and 5 as a PowerPoint deck at full resolution
  slidefetch https://www.slideshare.net/user/deck --slides 1,3-5 --format pptx --resolution 2048

  # Show the slide count and preview URLs only
  slidefetch https://www.slideshare.net/user/deck --list

Environment Variables:
  MAX_CONCURRENT_FETCHES   Image downloads in flight (default: 20)
  FETCH_ATTEMPTS           Attempts per image (default: 3)
  FETCH_TIMEOUT            Per-attempt timeout in seconds (default: 30)
        """,
    )

    parser.add_argument("url", help="Presentation page URL")

    parser.add_argument(
        "--version",
        action="version",
        version=f"SlideFetch {__version__}",
    )

    parser.add_argument(
        "--format",
        "-f",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.PDF.value,
        help="Output format; jpg and png are delivered as a ZIP (default: pdf)",
    )

    parser.add_argument(
        "--resolution",
        "-r",
        choices=list(RESOLUTION_PRESETS),
        default="2048",
        help="Image width preset (default: 2048)",
    )

    parser.add_argument(
        "--slides",
        "-s",
        default="",
        help="1-based slide selection such as '1,3-5' (default: all)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("."),
        help="Output directory (default: current directory)",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="List slides and preview URLs without downloading",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(run(args, settings))

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130

    except SlideFetchError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        return 1

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
