"""
Core data models for SlideFetch.

Slideshow metadata and generation requests are Pydantic models with camelCase
JSON aliases matching the HTTP API. Fetched images and finished artifacts are
plain dataclasses that only live for the duration of one request.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from slidefetch.errors import ValidationError


class SlideshowMetadata(BaseModel):
    """Host/path/title triple plus slide count of a remote presentation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = ""
    image_location: str = Field(default="", alias="imageLocation")
    image_title: str = Field(default="", alias="imageTitle")
    total_slides: int = Field(default=0, ge=0, alias="totalSlides")

    def to_dict(self) -> Dict[str, Any]:
        """Export with the API's camelCase keys."""
        return self.model_dump(by_alias=True)


class ResolutionPreset(BaseModel):
    """Target pixel width and re-encode quality of the remote image."""

    model_config = ConfigDict(frozen=True)

    quality: int = Field(ge=1, le=100)
    width: int = Field(gt=0)


RESOLUTION_PRESETS: Dict[str, ResolutionPreset] = {
    "320": ResolutionPreset(quality=85, width=320),
    "638": ResolutionPreset(quality=85, width=638),
    "2048": ResolutionPreset(quality=75, width=2048),
}

PREVIEW_RESOLUTION = "320"


class OutputFormat(str, Enum):
    """Artifact formats a client can ask for."""

    JPG = "jpg"
    PNG = "png"
    ZIP = "zip"
    PDF = "pdf"
    PPTX = "pptx"

    @property
    def raster_format(self) -> str:
        """Raster format every fetched image is normalized to."""
        return "png" if self is OutputFormat.PNG else "jpeg"

    @property
    def extension(self) -> str:
        """File extension of the artifact; image formats ship as an archive."""
        if self in (OutputFormat.JPG, OutputFormat.PNG, OutputFormat.ZIP):
            return "zip"
        return self.value


class SlideshowDetails(BaseModel):
    """Result of locating a slideshow on its page."""

    model_config = ConfigDict(populate_by_name=True)

    total_slides: int = Field(default=0, alias="totalSlides")
    slide_images_preview: List[str] = Field(default_factory=list, alias="slideImagesPreview")
    slideshow_info: SlideshowMetadata = Field(alias="slideshowInfo")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class GenerationRequest(BaseModel):
    """A validated request to build one artifact."""

    model_config = ConfigDict(frozen=True)

    metadata: SlideshowMetadata
    resolution_key: str
    output_format: OutputFormat
    selected_indices: List[int]

    @property
    def preset(self) -> ResolutionPreset:
        return RESOLUTION_PRESETS[self.resolution_key]

    @property
    def raster_format(self) -> str:
        return self.output_format.raster_format

    @classmethod
    def build(
        cls,
        metadata: Union[SlideshowMetadata, Dict[str, Any], None],
        resolution_key: Optional[str],
        output_format: Optional[str],
        selected_indices: Optional[List[Any]],
    ) -> "GenerationRequest":
        """
        Validate raw request fields before any I/O happens.

        Args:
            metadata: Slideshow info, as a model or a camelCase dict
            resolution_key: Key into RESOLUTION_PRESETS
            output_format: One of jpg, png, zip, pdf, pptx
            selected_indices: 0-based slide indices in the order they should appear

        Returns:
            GenerationRequest

        Raises:
            ValidationError: If any field is missing or invalid
        """
        if not metadata or not resolution_key or not output_format or selected_indices is None:
            raise ValidationError("Missing required data.")

        if not isinstance(metadata, SlideshowMetadata):
            if not isinstance(metadata, dict):
                raise ValidationError("Invalid slideshow info.")
            try:
                metadata = SlideshowMetadata.model_validate(metadata)
            except PydanticValidationError:
                raise ValidationError("Invalid slideshow info.")

        if not (metadata.host and metadata.image_location and metadata.image_title):
            raise ValidationError("Slideshow info must include host, imageLocation and imageTitle.")

        if not isinstance(selected_indices, list) or len(selected_indices) == 0:
            raise ValidationError("No slides selected.")

        for index in selected_indices:
            # bool is an int subclass; reject it explicitly
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise ValidationError("Selected indices must be non-negative integers.")
            if metadata.total_slides and index >= metadata.total_slides:
                raise ValidationError(
                    f"Slide index {index} is out of range "
                    f"(slideshow has {metadata.total_slides} slides)."
                )

        if resolution_key not in RESOLUTION_PRESETS:
            raise ValidationError("Invalid resolution chosen.")

        try:
            fmt = OutputFormat(output_format)
        except ValueError:
            raise ValidationError("Invalid output format.")

        return cls(
            metadata=metadata,
            resolution_key=resolution_key,
            output_format=fmt,
            selected_indices=list(selected_indices),
        )


IMAGE_MIME_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
}

IMAGE_EXTENSIONS = {
    "jpeg": "jpg",
    "png": "png",
}


@dataclass
class FetchedImage:
    """One normalized slide image, tagged with its position in the selection."""

    position: int
    url: str
    data: bytes
    width: int
    height: int
    format: str  # "jpeg" or "png"

    @property
    def extension(self) -> str:
        return IMAGE_EXTENSIONS[self.format]

    @property
    def mime_type(self) -> str:
        return IMAGE_MIME_TYPES[self.format]


@dataclass
class Artifact:
    """A finished file in the downloads directory."""

    filename: str
    path: Path
    output_format: OutputFormat
    image_count: int
    size_bytes: int
