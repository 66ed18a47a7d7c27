"""Image generation services - model selection, payload assembly and batched Gemini calls."""
import asyncio
from typing import Any, List, Optional, Tuple

from common.backend import GenerativeBackend, get_backend
from common.credentials import CredentialGate, get_credential_gate
from common.exceptions import BatchGenerationError, NoImageDataError
from common.models import ContentPart, ImageInput
from config import Config
from image.models import (
    AspectRatio,
    GeneratedImage,
    GenerationRequest,
    ImagePayload,
    ImageResolution,
)
from utils.logger import get_logger

logger = get_logger("image.services")

DEFAULT_IMAGE_MIME_TYPE = "image/png"


def select_image_model(resolution: ImageResolution) -> str:
    """Baseline resolution uses the fast model, anything higher the pro model."""
    if ImageResolution(resolution).is_baseline:
        return Config.IMAGE_MODEL_FAST
    return Config.IMAGE_MODEL_PRO


def is_pro_model(model: str) -> bool:
    return model == Config.IMAGE_MODEL_PRO


def resolve_aspect_ratio(request: GenerationRequest) -> str:
    """
    Aspect ratio string sent to the model.

    CUSTOM ratios are passed as "{width}:{height}" without reducing to lowest
    terms, falling back to "1:1" when either dimension is missing.
    """
    if request.aspect_ratio == AspectRatio.CUSTOM:
        if request.width and request.height:
            return f"{request.width}:{request.height}"
        return AspectRatio.SQUARE.value
    return request.aspect_ratio.value


def build_image_payload(request: GenerationRequest) -> ImagePayload:
    """
    Assemble the content-generation payload for a request.

    Parts are ordered reference images first, then the context image, then
    the prompt text. The size tier is only attached for the pro model; the
    fast model rejects it.
    """
    model = select_image_model(request.resolution)

    parts = [ContentPart.from_image(img) for img in request.reference_images]
    if request.context_image is not None:
        parts.append(ContentPart.from_image(request.context_image))
    parts.append(ContentPart.from_text(request.prompt))

    return ImagePayload(
        model=model,
        parts=parts,
        aspect_ratio=resolve_aspect_ratio(request),
        image_size=request.resolution.value if is_pro_model(model) else None,
    )


def extract_image(response: Any) -> Tuple[bytes, str]:
    """Return (data, mime_type) of the first inline image in a response."""
    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline and getattr(inline, "data", None):
                return inline.data, getattr(inline, "mime_type", None) or DEFAULT_IMAGE_MIME_TYPE
    raise NoImageDataError("No image data found in response")


async def _generate_one(
    index: int,
    payload: ImagePayload,
    request: GenerationRequest,
    backend: GenerativeBackend,
) -> GeneratedImage:
    response = await backend.generate_content(payload)
    data, mime_type = extract_image(response)
    logger.debug(f"Call {index}: received {mime_type} image ({len(data)} bytes)")
    is_custom = request.aspect_ratio == AspectRatio.CUSTOM
    return GeneratedImage(
        mime_type=mime_type,
        data=data,
        prompt=request.prompt,
        aspect_ratio=payload.aspect_ratio,
        width=request.width if is_custom else None,
        height=request.height if is_custom else None,
    )


async def generate_batch(
    count: int,
    request: GenerationRequest,
    backend: GenerativeBackend,
    gate: CredentialGate,
) -> List[GeneratedImage]:
    """
    Issue `count` identical generation calls concurrently.

    The batch is all-or-nothing: if any call fails, BatchGenerationError is
    raised carrying the failure of the lowest-indexed failed call.
    """
    if count < 1:
        raise ValueError(f"count must be a positive integer, got {count}")

    payload = build_image_payload(request)
    if is_pro_model(payload.model):
        await gate.ensure_authorized()

    logger.info(f"Generating {count} image(s) with {payload.model} (aspect ratio {payload.aspect_ratio})")

    results = await asyncio.gather(
        *(_generate_one(i, payload, request, backend) for i in range(count)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        raise BatchGenerationError(failures[0], failures=len(failures), count=count) from failures[0]
    return list(results)


async def generate_images(
    count: int,
    request: GenerationRequest,
    backend: Optional[GenerativeBackend] = None,
    gate: Optional[CredentialGate] = None,
) -> List[GeneratedImage]:
    """Entry point for batched image generation; logs failures before re-raising."""
    backend = backend or get_backend()
    gate = gate or get_credential_gate()
    try:
        images = await generate_batch(count, request, backend, gate)
    except Exception as e:
        logger.error(f"Image generation failed: {e}")
        raise
    logger.info(f"Generated {len(images)} image(s) for prompt: {request.prompt[:50]}")
    return images


def build_upscale_request(image: GeneratedImage) -> GenerationRequest:
    """
    Turn a previously generated image into a 4K edit request.

    The image becomes the context image and its aspect ratio settings are
    carried over: explicit dimensions first, then a matching enumerated
    ratio, else square.
    """
    if image.width and image.height:
        aspect_ratio = AspectRatio.CUSTOM
    else:
        try:
            aspect_ratio = AspectRatio(image.aspect_ratio)
        except ValueError:
            aspect_ratio = AspectRatio.SQUARE
        if aspect_ratio == AspectRatio.CUSTOM:
            aspect_ratio = AspectRatio.SQUARE

    return GenerationRequest(
        prompt=image.prompt,
        aspect_ratio=aspect_ratio,
        width=image.width if aspect_ratio == AspectRatio.CUSTOM else None,
        height=image.height if aspect_ratio == AspectRatio.CUSTOM else None,
        resolution=ImageResolution.RES_4K,
        context_image=ImageInput(mime_type=image.mime_type, data=image.data),
        is_editing=True,
    )
