"""Video generation routes."""
from fastapi import APIRouter, Depends

from assets.services import download_video_asset
from common.backend import GenerativeBackend, get_backend
from common.credentials import CredentialGate, get_credential_gate
from common.exceptions import GenerationError, to_bad_request, to_http_exception
from config import Config
from utils.logger import get_logger
from videos.models import GenerateVideoRequest, GenerateVideoResponse
from videos.services import generate_video

logger = get_logger("videos")
router = APIRouter(tags=["videos"])


@router.post("/api/videos/generate", response_model=GenerateVideoResponse)
async def generate_video_endpoint(
    req: GenerateVideoRequest,
    backend: GenerativeBackend = Depends(get_backend),
    gate: CredentialGate = Depends(get_credential_gate),
):
    """
    Generate a video from a prompt and/or an input image using Veo.

    Behavior:
      - run the credential gate, submit the job and poll until it finishes
      - return a URI that is fetchable on its own (key appended)
      - optionally download the video under ASSETS_DIR/videos
    """
    logger.info(f"Video generation request - aspect_ratio: {req.aspect_ratio.value}, input_image: {bool(req.input_image)}")

    try:
        request = req.to_generation_request()
    except ValueError as e:
        logger.warning(f"Rejected request: {e}")
        raise to_bad_request(e)

    try:
        video = await generate_video(request, backend=backend, gate=gate)
    except GenerationError as e:
        raise to_http_exception(e)

    saved_path = await download_video_asset(video) if Config.AUTO_SAVE_ASSETS else None

    return GenerateVideoResponse(
        id=video.id,
        video_url=video.url,
        prompt=video.prompt,
        aspect_ratio=video.aspect_ratio,
        created_at=video.created_at,
        saved_path=saved_path,
    )
