"""
Pydantic models for API requests/responses.

Request fields are all optional here; presence and value checks happen in
``GenerationRequest.build`` so every rejection carries the same error body.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class GetSlidesRequest(BaseModel):
    """Body of POST /api/get-slides."""

    model_config = ConfigDict(populate_by_name=True)

    slideshare_url: Optional[str] = Field(default=None, alias="slideshareUrl")


class GenerateFileRequest(BaseModel):
    """Body of POST /api/generate-file."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "slideshowInfo": {
                    "host": "https://image.slidesharecdn.com",
                    "imageLocation": "deck-123456",
                    "imageTitle": "deck",
                },
                "resolution": "2048",
                "outputFormat": "pdf",
                "selectedIndices": [0, 2, 3],
            }
        },
    )

    slideshow_info: Optional[Dict[str, Any]] = Field(default=None, alias="slideshowInfo")
    resolution: Optional[Union[str, int]] = None
    output_format: Optional[str] = Field(default=None, alias="outputFormat")
    selected_indices: Optional[List[Any]] = Field(default=None, alias="selectedIndices")


class GenerateFileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    download_url: str = Field(alias="downloadUrl")


class ErrorResponse(BaseModel):
    """Every failure is reported as a single human-readable message."""

    error: str
