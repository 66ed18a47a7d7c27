"""Image generation routes."""
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from assets.services import save_image_asset
from common.backend import GenerativeBackend, get_backend
from common.credentials import CredentialGate, get_credential_gate
from common.exceptions import GenerationError, to_bad_request, to_http_exception
from config import Config
from image.models import (
    GenerateImagesRequest,
    GenerateImagesResponse,
    GeneratedImage,
    ImageAssetResponse,
    UpscaleImageRequest,
)
from image.services import build_upscale_request, generate_images
from utils.logger import get_logger

logger = get_logger("image")
router = APIRouter(tags=["image"])


async def _to_response(images) -> GenerateImagesResponse:
    assets = []
    for image in images:
        saved_path = await run_in_threadpool(save_image_asset, image) if Config.AUTO_SAVE_ASSETS else None
        assets.append(ImageAssetResponse.from_asset(image, saved_path=saved_path))
    return GenerateImagesResponse(images=assets)


@router.post("/api/images/generate", response_model=GenerateImagesResponse)
async def generate(
    req: GenerateImagesRequest,
    backend: GenerativeBackend = Depends(get_backend),
    gate: CredentialGate = Depends(get_credential_gate),
):
    """
    Generate a batch of images using Gemini.

    Behavior:
      - decode reference/context images
      - run `count` generation calls concurrently
      - all-or-nothing: any failed call fails the request
      - optionally save each image under ASSETS_DIR
    """
    try:
        request = req.to_generation_request()
    except ValueError as e:
        logger.warning(f"Rejected request: {e}")
        raise to_bad_request(e)

    try:
        images = await generate_images(req.count, request, backend=backend, gate=gate)
    except GenerationError as e:
        raise to_http_exception(e)

    return await _to_response(images)


@router.post("/api/images/upscale", response_model=GenerateImagesResponse)
async def upscale(
    req: UpscaleImageRequest,
    backend: GenerativeBackend = Depends(get_backend),
    gate: CredentialGate = Depends(get_credential_gate),
):
    """Re-render a previously generated image at 4K in editing mode."""
    try:
        source = req.image.to_input()
        previous = GeneratedImage(
            mime_type=source.mime_type,
            data=source.data,
            prompt=req.prompt,
            aspect_ratio=req.aspect_ratio,
            width=req.width,
            height=req.height,
        )
        request = build_upscale_request(previous)
    except ValueError as e:
        logger.warning(f"Rejected request: {e}")
        raise to_bad_request(e)

    logger.info(f"Upscaling image (aspect ratio {request.aspect_ratio.value}) to {request.resolution.value}")
    try:
        images = await generate_images(1, request, backend=backend, gate=gate)
    except GenerationError as e:
        raise to_http_exception(e)

    return await _to_response(images)
