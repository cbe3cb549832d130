"""FastAPI server exposing the photoshoot pipeline."""

from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from logic.errors import InvalidCredentialError, PhotoshootError
from memory.usage_store import USER_ID_PATTERN, QuotaExceededError, validate_user_id
from models.catalog import ModelAttributes, catalog_options
from models.garment import GarmentAnalysis
from models.image import ImagePayload
from studio_app.app import PhotoshootStudioApp
from studio_app.config import StudioConfig
from studio_app.logging_config import configure_logging, get_logger

configure_logging()

LOGGER = get_logger(__name__)
app = FastAPI(title="Fashion Photoshoot Studio", version="0.1.0")


@lru_cache(maxsize=1)
def get_studio() -> PhotoshootStudioApp:
    """Build the studio on first use so health checks work without a credential."""

    return PhotoshootStudioApp(StudioConfig.from_env())


def _decode_image(value: str) -> ImagePayload:
    try:
        return ImagePayload.from_data_uri(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


class AnalyzeRequest(BaseModel):
    """Garment photo as a data URI or bare base64."""

    image: str = Field(..., min_length=1)


class ModelAttributesPayload(BaseModel):
    gender: str = "Female"
    age: str = "18-25"
    ethnicity: str = "Any"
    body_type: str = "Any"
    creative_details: str = ""


class PhotoshootRequest(BaseModel):
    """Request payload for a multi-pose photoshoot."""

    user_id: str = Field(..., min_length=1, max_length=128, pattern=USER_ID_PATTERN)
    garment_image: str = Field(..., min_length=1)
    analysis: GarmentAnalysis
    scene_id: str = "auto"
    custom_scene: Optional[str] = None
    model: ModelAttributesPayload = Field(default_factory=ModelAttributesPayload)
    pose_ids: List[str] = Field(default_factory=lambda: ["front"], min_length=1)

    @field_validator("user_id")
    @classmethod
    def _safe_user_id(cls, value: str) -> str:
        return validate_user_id(value)


class RefineRequest(BaseModel):
    image: str = Field(..., min_length=1)
    instruction: str = Field(..., min_length=1)


@app.exception_handler(InvalidCredentialError)
async def _credential_error(_: Request, exc: InvalidCredentialError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"code": "RESELECT_CREDENTIAL", "detail": "API credential expired or invalid. Please re-select."},
    )


@app.exception_handler(QuotaExceededError)
async def _quota_error(_: Request, exc: QuotaExceededError) -> JSONResponse:
    return JSONResponse(status_code=429, content={"code": "QUOTA_EXCEEDED", "detail": str(exc)})


@app.exception_handler(PhotoshootError)
async def _provider_error(_: Request, exc: PhotoshootError) -> JSONResponse:
    LOGGER.error("Photoshoot pipeline failed", extra={"error": str(exc), "error_kind": exc.kind.value})
    return JSONResponse(
        status_code=502,
        content={"code": "GENERATION_FAILED", "detail": "Generation failed. Please try again later."},
    )


@app.exception_handler(ValueError)
async def _value_error(_: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"code": "BAD_REQUEST", "detail": str(exc)})


@app.get("/healthz")
async def healthcheck() -> dict:
    """Readiness probe."""

    config = StudioConfig.from_env()
    return {
        "status": "ok",
        "service": "fashion-photoshoot-studio",
        "environment": config.environment or "local",
        "image_model": config.image_model,
    }


@app.get("/catalog")
async def catalog() -> dict:
    """Scenes, poses and model options available to clients."""

    return catalog_options()


@app.post("/garments/analyze")
async def analyze_garment(request: AnalyzeRequest, studio: PhotoshootStudioApp = Depends(get_studio)) -> dict:
    analysis = await studio.analyze_garment(_decode_image(request.image))
    return {"analysis": analysis.to_wire()}


@app.post("/photoshoots")
async def create_photoshoot(
    request: PhotoshootRequest, studio: PhotoshootStudioApp = Depends(get_studio)
) -> dict:
    """Run the full sequence; the response holds every frame or an error."""

    frames = await studio.produce_photoshoot(
        user_id=request.user_id,
        garment_image=_decode_image(request.garment_image),
        analysis=request.analysis,
        scene_id=request.scene_id,
        custom_scene=request.custom_scene,
        model_attributes=ModelAttributes(**request.model.model_dump()),
        pose_ids=request.pose_ids,
    )
    usage = studio.usage_tracker.get_usage(request.user_id)
    return {
        "frames": [{"id": frame.id, "image": frame.image.to_data_uri()} for frame in frames],
        "usage": {"count": usage.count, "last_reset": usage.last_reset},
    }


@app.post("/images/refine")
async def refine_image(request: RefineRequest, studio: PhotoshootStudioApp = Depends(get_studio)) -> dict:
    refined = await studio.refine_image(_decode_image(request.image), request.instruction)
    return {"image": refined.to_data_uri()}


@app.get("/usage/{user_id}")
async def usage(user_id: str, studio: PhotoshootStudioApp = Depends(get_studio)) -> dict:
    counter = studio.usage_tracker.get_usage(user_id)
    return {
        "count": counter.count,
        "last_reset": counter.last_reset,
        "remaining": studio.usage_tracker.remaining(user_id),
    }


@app.get("/history/{user_id}")
async def history(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    studio: PhotoshootStudioApp = Depends(get_studio),
) -> dict:
    entries = studio.history.list_entries(user_id, limit=limit)
    return {"entries": [vars(entry) for entry in entries]}


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
