"""Tests for image model selection, payload assembly and batch execution."""
import pytest
from pydantic import ValidationError

from common.exceptions import BackendCallError, BatchGenerationError, NoImageDataError
from common.models import ImageInput
from config import Config
from image.models import AspectRatio, GeneratedImage, GenerationRequest, ImageResolution
from image.services import (
    build_image_payload,
    build_upscale_request,
    extract_image,
    generate_batch,
    generate_images,
    resolve_aspect_ratio,
    select_image_model,
)
from tests.conftest import FakeBackend, image_part, make_response, text_part


# ============================================================================
# Model selection
# ============================================================================


def test_baseline_resolution_uses_fast_model():
    assert select_image_model(ImageResolution.RES_1K) == Config.IMAGE_MODEL_FAST


@pytest.mark.parametrize("resolution", [ImageResolution.RES_2K, ImageResolution.RES_4K])
def test_higher_resolutions_use_pro_model(resolution):
    assert select_image_model(resolution) == Config.IMAGE_MODEL_PRO


# ============================================================================
# Aspect ratio and payload assembly
# ============================================================================


def test_custom_ratio_uses_raw_dimensions():
    request = GenerationRequest(prompt="p", aspect_ratio=AspectRatio.CUSTOM, width=1280, height=720)
    assert resolve_aspect_ratio(request) == "1280:720"


@pytest.mark.parametrize("width,height", [(None, 720), (1280, None), (None, None)])
def test_custom_ratio_falls_back_to_square(width, height):
    request = GenerationRequest(prompt="p", aspect_ratio=AspectRatio.CUSTOM, width=width, height=height)
    assert resolve_aspect_ratio(request) == "1:1"


def test_enumerated_ratio_is_passed_through():
    request = GenerationRequest(prompt="p", aspect_ratio=AspectRatio.PORTRAIT)
    assert build_image_payload(request).aspect_ratio == "9:16"


def test_parts_are_references_then_context_then_prompt():
    a = ImageInput(mime_type="image/png", data=b"A")
    b = ImageInput(mime_type="image/jpeg", data=b"B")
    c = ImageInput(mime_type="image/webp", data=b"C")
    request = GenerationRequest(prompt="p", reference_images=[a, b], context_image=c)

    parts = build_image_payload(request).parts

    assert [p.inline_data for p in parts[:3]] == [a, b, c]
    assert parts[3].text == "p"
    assert parts[3].inline_data is None
    assert len(parts) == 4


def test_image_size_only_attached_for_pro_model():
    fast = build_image_payload(GenerationRequest(prompt="p", resolution=ImageResolution.RES_1K))
    pro = build_image_payload(GenerationRequest(prompt="p", resolution=ImageResolution.RES_4K))

    assert fast.image_size is None
    assert fast.image_config() == {"aspect_ratio": "1:1"}
    assert pro.model == Config.IMAGE_MODEL_PRO
    assert pro.image_config() == {"aspect_ratio": "1:1", "image_size": "4K"}


def test_prompt_required_without_context_image():
    with pytest.raises(ValidationError):
        GenerationRequest(prompt="")


def test_whitespace_prompt_is_passed_through():
    request = GenerationRequest(prompt="  ")
    assert build_image_payload(request).parts[-1].text == "  "


def test_context_image_allows_empty_prompt(png_image):
    request = GenerationRequest(prompt="", context_image=png_image, is_editing=True)
    assert build_image_payload(request).parts[-1].text == ""


def test_reference_images_are_capped(png_image):
    with pytest.raises(ValidationError):
        GenerationRequest(prompt="p", reference_images=[png_image] * (Config.MAX_REFERENCE_IMAGES + 1))


# ============================================================================
# Result extraction
# ============================================================================


def test_extract_skips_text_parts():
    data, mime_type = extract_image(make_response(text_part("here you go"), image_part(b"img", "image/jpeg")))
    assert data == b"img"
    assert mime_type == "image/jpeg"


def test_extract_defaults_mime_type():
    _, mime_type = extract_image(make_response(image_part(b"img", None)))
    assert mime_type == "image/png"


def test_extract_without_image_raises():
    with pytest.raises(NoImageDataError):
        extract_image(make_response(text_part("sorry")))


# ============================================================================
# Batch execution
# ============================================================================


async def test_single_call_returns_one_asset(gate):
    backend = FakeBackend(image_responses=[make_response(image_part(b"one", "image/png"))])
    request = GenerationRequest(prompt="a red fox")

    images = await generate_batch(1, request, backend, gate)

    assert len(images) == 1
    assert images[0].mime_type == "image/png"
    assert images[0].data == b"one"
    assert images[0].prompt == "a red fox"
    assert images[0].url.startswith("data:image/png;base64,")


async def test_calls_run_concurrently(gate):
    backend = FakeBackend()
    images = await generate_batch(3, GenerationRequest(prompt="p"), backend, gate)

    assert len(images) == 3
    assert len(backend.payloads) == 3
    assert backend.max_active == 3


async def test_one_failed_call_fails_the_batch(gate):
    failure = BackendCallError("boom", status_code=500)
    backend = FakeBackend(image_responses=[
        make_response(image_part()),
        failure,
        make_response(image_part()),
    ])

    with pytest.raises(BatchGenerationError) as exc_info:
        await generate_batch(3, GenerationRequest(prompt="p"), backend, gate)

    assert exc_info.value.first_error is failure
    assert exc_info.value.failures == 1
    assert exc_info.value.count == 3
    assert len(backend.payloads) == 3


async def test_missing_image_data_fails_the_batch(gate):
    backend = FakeBackend(image_responses=[make_response(text_part("no image"))])

    with pytest.raises(BatchGenerationError) as exc_info:
        await generate_batch(1, GenerationRequest(prompt="p"), backend, gate)

    assert isinstance(exc_info.value.first_error, NoImageDataError)


async def test_pro_batch_runs_gate_once(gate):
    backend = FakeBackend()
    request = GenerationRequest(prompt="p", resolution=ImageResolution.RES_2K)

    await generate_batch(3, request, backend, gate)

    assert gate.calls == 1


async def test_fast_batch_skips_gate(gate):
    await generate_batch(2, GenerationRequest(prompt="p"), FakeBackend(), gate)
    assert gate.calls == 0


async def test_calls_share_one_payload(gate):
    backend = FakeBackend()
    await generate_batch(2, GenerationRequest(prompt="p"), backend, gate)
    assert backend.payloads[0] is backend.payloads[1]


async def test_count_must_be_positive(gate):
    with pytest.raises(ValueError):
        await generate_batch(0, GenerationRequest(prompt="p"), FakeBackend(), gate)


async def test_custom_dimensions_are_carried_on_assets(gate):
    request = GenerationRequest(prompt="p", aspect_ratio=AspectRatio.CUSTOM, width=1280, height=720)
    images = await generate_images(1, request, backend=FakeBackend(), gate=gate)

    assert images[0].aspect_ratio == "1280:720"
    assert (images[0].width, images[0].height) == (1280, 720)


async def test_entry_point_reraises_batch_errors(gate):
    backend = FakeBackend(image_responses=[BackendCallError("down")])
    with pytest.raises(BatchGenerationError):
        await generate_images(1, GenerationRequest(prompt="p"), backend=backend, gate=gate)


# ============================================================================
# Upscale
# ============================================================================


def test_upscale_keeps_custom_dimensions():
    image = GeneratedImage(data=b"x", prompt="castle", aspect_ratio="1280:720", width=1280, height=720)
    request = build_upscale_request(image)

    assert request.aspect_ratio == AspectRatio.CUSTOM
    assert (request.width, request.height) == (1280, 720)
    assert request.resolution == ImageResolution.RES_4K
    assert request.is_editing is True
    assert request.context_image.data == b"x"
    assert request.prompt == "castle"


def test_upscale_keeps_enumerated_ratio():
    image = GeneratedImage(data=b"x", prompt="castle", aspect_ratio="16:9")
    assert build_upscale_request(image).aspect_ratio == AspectRatio.LANDSCAPE


def test_upscale_unknown_ratio_falls_back_to_square():
    image = GeneratedImage(data=b"x", prompt="castle", aspect_ratio="3:2")
    assert build_upscale_request(image).aspect_ratio == AspectRatio.SQUARE
