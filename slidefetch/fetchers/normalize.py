"""
Image normalization: every fetched image is decoded and re-encoded into one
canonical raster format, whatever format the host served.
"""

from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from slidefetch.errors import UpstreamError

SAVE_FORMATS = {
    "jpeg": "JPEG",
    "png": "PNG",
}


def normalize_image(data: bytes, raster_format: str, quality: int = 95) -> Tuple[bytes, int, int]:
    """
    Re-encode image bytes into ``raster_format``.

    Args:
        data: Raw bytes as served
        raster_format: "jpeg" or "png"
        quality: JPEG quality (ignored for PNG)

    Returns:
        Tuple of (encoded_bytes, width, height)
    """
    save_format = SAVE_FORMATS.get(raster_format)
    if save_format is None:
        raise ValueError(f"Unsupported raster format: {raster_format}")

    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise UpstreamError(f"Could not decode image: {e}")

    if save_format == "JPEG":
        if img.mode in ("RGBA", "LA", "P"):
            # Flatten transparency onto white
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            img = background
        elif img.mode != "RGB":
            img = img.convert("RGB")
    elif img.mode not in ("RGB", "RGBA"):
        has_alpha = img.mode in ("LA", "PA") or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")

    output = BytesIO()
    save_kwargs = {"format": save_format}
    if save_format == "JPEG":
        save_kwargs["quality"] = quality
    img.save(output, **save_kwargs)

    width, height = img.size
    return output.getvalue(), width, height
