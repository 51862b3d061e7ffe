"""
Tests for the fetch-and-normalize pipeline and the retry policy.
"""

import asyncio
from io import BytesIO

import httpx
import pytest
from PIL import Image

from conftest import FakeSlideHost, make_image, slide_number_from_url, slide_size
from slidefetch.errors import FetchExhausted, UpstreamError
from slidefetch.fetchers import ImageFetcher, normalize_image
from slidefetch.retry import RetryPolicy


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers the requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def slide_urls(numbers):
    return [f"https://cdn.example.com/deck/85/deck-{n}-320.jpg" for n in numbers]


def no_wait_policy(max_attempts: int = 3) -> RetryPolicy:
    return RetryPolicy(max_attempts=max_attempts, base_delay=0.0)


# --- Normalization ---

def test_normalize_png_to_jpeg():
    data, width, height = normalize_image(make_image(30, 20, fmt="PNG"), "jpeg")
    img = Image.open(BytesIO(data))
    assert img.format == "JPEG"
    assert (width, height) == (30, 20)


def test_normalize_jpeg_to_png():
    data, width, height = normalize_image(make_image(30, 20, fmt="JPEG"), "png")
    assert Image.open(BytesIO(data)).format == "PNG"
    assert (width, height) == (30, 20)


def test_normalize_always_reencodes():
    """A JPEG requested as JPEG is still decoded and re-encoded."""
    source = make_image(30, 20, fmt="JPEG")
    data, _, _ = normalize_image(source, "jpeg", quality=50)
    assert data != source
    assert Image.open(BytesIO(data)).format == "JPEG"


def test_normalize_flattens_transparency_for_jpeg():
    source = make_image(10, 10, fmt="PNG", color=(0, 0, 0, 0), mode="RGBA")
    data, _, _ = normalize_image(source, "jpeg")
    img = Image.open(BytesIO(data))
    assert img.mode == "RGB"
    assert img.getpixel((5, 5))[0] > 240  # white background


def test_normalize_rejects_garbage():
    with pytest.raises(UpstreamError):
        normalize_image(b"definitely not an image", "jpeg")


# --- Retry policy ---

def test_retry_policy_backoff_grows():
    policy = RetryPolicy(base_delay=1.0)
    assert [policy.delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]


def test_retry_policy_rejects_zero_attempts():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_retry_policy_waits_between_attempts():
    sleep = RecordingSleep()
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleep)
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise httpx.ConnectError("refused")
        return "ok"

    assert await policy.run(flaky, "https://x") == "ok"
    assert len(calls) == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_retry_policy_exhausts():
    sleep = RecordingSleep()
    policy = RetryPolicy(max_attempts=3, base_delay=0.5, sleep=sleep)

    async def always_fails():
        raise httpx.ReadTimeout("slow")

    with pytest.raises(FetchExhausted) as exc_info:
        await policy.run(always_fails, "https://x/1.jpg")

    assert exc_info.value.url == "https://x/1.jpg"
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, httpx.ReadTimeout)
    # No wait after the final attempt
    assert sleep.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_retry_policy_does_not_retry_other_errors():
    policy = no_wait_policy()
    calls = []

    async def broken():
        calls.append(1)
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        await policy.run(broken, "https://x")
    assert len(calls) == 1


# --- Fetcher ---

@pytest.mark.asyncio
async def test_fetch_all_preserves_input_order():
    """Results follow input order even when later URLs finish first."""

    async def handler(request):
        number = slide_number_from_url(str(request.url))
        await asyncio.sleep(0.01 * (5 - number))
        return httpx.Response(200, content=make_image(*slide_size(number)))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = ImageFetcher(client, retry_policy=no_wait_policy())

    urls = slide_urls([1, 4, 2, 3])
    images = await fetcher.fetch_all(urls, "jpeg")

    assert [img.url for img in images] == urls
    assert [img.position for img in images] == [0, 1, 2, 3]
    assert [(img.width, img.height) for img in images] == [slide_size(n) for n in (1, 4, 2, 3)]


@pytest.mark.asyncio
async def test_fetch_all_normalizes_to_png():
    host = FakeSlideHost()
    fetcher = ImageFetcher(httpx.AsyncClient(transport=host.transport()), retry_policy=no_wait_policy())

    images = await fetcher.fetch_all(slide_urls([1, 2]), "png")

    assert all(img.format == "png" for img in images)
    assert all(Image.open(BytesIO(img.data)).format == "PNG" for img in images)
    assert images[0].extension == "png"
    assert images[0].mime_type == "image/png"


@pytest.mark.asyncio
async def test_fetch_all_retries_non_success_status():
    urls = slide_urls([1, 2])
    host = FakeSlideHost(failures={urls[1]: 2})
    fetcher = ImageFetcher(httpx.AsyncClient(transport=host.transport()), retry_policy=no_wait_policy())

    images = await fetcher.fetch_all(urls, "jpeg")

    assert len(images) == 2
    assert host.image_requests.count(urls[1]) == 3
    assert host.image_requests.count(urls[0]) == 1


@pytest.mark.asyncio
async def test_fetch_all_aborts_batch_on_permanent_failure():
    urls = slide_urls([1, 2, 3])
    host = FakeSlideHost(failures={urls[1]: -1})
    fetcher = ImageFetcher(httpx.AsyncClient(transport=host.transport()), retry_policy=no_wait_policy())

    with pytest.raises(FetchExhausted) as exc_info:
        await fetcher.fetch_all(urls, "jpeg")

    assert exc_info.value.url == urls[1]
    assert isinstance(exc_info.value.last_error, httpx.HTTPStatusError)
    assert host.image_requests.count(urls[1]) == 3


@pytest.mark.asyncio
async def test_fetch_attempt_has_overall_deadline():
    """A host that never finishes responding times out each attempt and is retried."""
    calls = []

    async def handler(request):
        calls.append(str(request.url))
        await asyncio.sleep(5)
        return httpx.Response(200, content=make_image(8, 8))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = ImageFetcher(client, retry_policy=no_wait_policy(max_attempts=2), timeout=0.05)

    with pytest.raises(FetchExhausted) as exc_info:
        await fetcher.fetch_all(slide_urls([1]), "jpeg")

    assert isinstance(exc_info.value.last_error, httpx.TimeoutException)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_fetch_all_bounds_concurrency():
    in_flight = 0
    peak = 0

    async def handler(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, content=make_image(8, 8))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = ImageFetcher(client, retry_policy=no_wait_policy(), max_concurrency=3)

    images = await fetcher.fetch_all(slide_urls(range(1, 11)), "jpeg")

    assert len(images) == 10
    assert peak == 3


@pytest.mark.asyncio
async def test_fetch_all_empty():
    fetcher = ImageFetcher(httpx.AsyncClient(transport=FakeSlideHost().transport()))
    assert await fetcher.fetch_all([], "jpeg") == []


def test_fetcher_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        ImageFetcher(httpx.AsyncClient(), max_concurrency=0)
