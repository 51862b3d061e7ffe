"""
Main FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from server import __version__
from server.models import (
    ErrorResponse,
    GenerateFileRequest,
    GenerateFileResponse,
    GetSlidesRequest,
)
from slidefetch.config import Settings
from slidefetch.errors import NotFoundError, SlideFetchError, ValidationError
from slidefetch.models import RESOLUTION_PRESETS, GenerationRequest
from slidefetch.pipeline import SlideFetchPipeline
from slidefetch.retention import RetentionScheduler
from slidefetch.storage import StorageContext

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".zip": "application/zip",
}


def media_type_for(path: Path) -> str:
    return MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


# --- Dependencies ---

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageContext:
    return request.app.state.storage


def get_pipeline(request: Request) -> SlideFetchPipeline:
    return request.app.state.pipeline


def get_retention(request: Request) -> RetentionScheduler:
    return request.app.state.retention


# --- Error handlers ---

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def slidefetch_error_handler(request: Request, exc: SlideFetchError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Error in {request.url.path}: {exc.message}")
    else:
        logger.info(f"Rejected {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.url.path}: malformed body ({len(exc.errors())} errors)")
    return error_response(400, "Invalid request body.")


# --- API Endpoints ---

router = APIRouter()


@router.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "SlideFetch API is running", "version": __version__}


@router.get("/api/resolutions")
async def list_resolutions():
    """Available resolution presets."""
    return {key: preset.model_dump() for key, preset in RESOLUTION_PRESETS.items()}


@router.post("/api/get-slides")
async def get_slides(
    body: GetSlidesRequest,
    pipeline: SlideFetchPipeline = Depends(get_pipeline),
):
    """
    Fetch slideshow metadata and preview image URLs from a SlideShare page.
    """
    if not body.slideshare_url:
        raise ValidationError("No SlideShare URL provided.")

    try:
        details = await pipeline.locate(body.slideshare_url)
    except SlideFetchError:
        raise
    except Exception as e:
        logger.exception("Error in /api/get-slides")
        return error_response(500, str(e))

    return details.to_dict()


@router.post("/api/generate-file", response_model=GenerateFileResponse)
async def generate_file(
    body: GenerateFileRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    pipeline: SlideFetchPipeline = Depends(get_pipeline),
):
    """
    Build a PDF, PPTX, or ZIP from the selected slides.

    Validates everything before any image is fetched, then returns an absolute
    download URL for the finished file.
    """
    generation = GenerationRequest.build(
        metadata=body.slideshow_info,
        resolution_key=str(body.resolution) if body.resolution is not None else None,
        output_format=body.output_format,
        selected_indices=body.selected_indices,
    )

    try:
        artifact = await pipeline.generate(generation)
    except SlideFetchError:
        raise
    except Exception as e:
        logger.exception("Error in /api/generate-file")
        return error_response(500, str(e))

    base_url = settings.public_base_url or str(request.base_url).rstrip("/")
    return GenerateFileResponse(download_url=f"{base_url}/downloads/{artifact.filename}")


@router.get("/downloads/{filename}")
async def download_artifact(
    filename: str,
    storage: StorageContext = Depends(get_storage),
    retention: RetentionScheduler = Depends(get_retention),
):
    """Stream a generated file, then schedule its deletion."""
    path = storage.download_path(filename)
    if path is None or not path.is_file():
        raise NotFoundError("File not found")

    retention.schedule(path)
    return FileResponse(path, media_type=media_type_for(path), filename=filename)


# --- Application ---

def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (default: read from the environment)
        transport: Optional httpx transport for outbound requests
    """
    settings = settings or Settings.from_env()

    # Lifespan context manager
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        app.state.storage = StorageContext(
            temp_dir=settings.temp_dir,
            downloads_dir=settings.downloads_dir,
        ).ensure()
        app.state.http_client = httpx.AsyncClient(transport=transport, follow_redirects=True)
        app.state.retention = RetentionScheduler(delay=settings.retention_seconds)
        app.state.pipeline = SlideFetchPipeline(
            app.state.http_client,
            app.state.storage,
            retry_policy=settings.retry_policy(),
            max_concurrency=settings.max_concurrent_fetches,
            timeout=settings.fetch_timeout,
        )
        logger.info(
            f"Storage: temp={settings.temp_dir} downloads={settings.downloads_dir}, "
            f"retention={settings.retention_seconds:.0f}s"
        )
        yield
        # Shutdown
        await app.state.retention.shutdown()
        await app.state.http_client.aclose()

    app = FastAPI(
        title="SlideFetch API",
        description="Download SlideShare slides as PDF, PPTX, or images",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SlideFetchError, slidefetch_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = app.state.settings
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
