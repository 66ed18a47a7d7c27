"""Gemini backend adapter built on the google-genai async client."""
from typing import Any, List, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from common.credentials import CredentialProvider, EnvironmentCredentialProvider
from common.exceptions import BackendCallError, MissingApiKeyError
from common.models import ContentPart
from image.models import ImagePayload
from utils.logger import get_logger
from videos.models import VideoJobHandle, VideoPayload

logger = get_logger("backend")


class GenerativeBackend(Protocol):
    """Outbound calls the generation core makes."""

    @property
    def access_token(self) -> Optional[str]:
        ...

    async def generate_content(self, payload: ImagePayload) -> Any:
        ...

    async def submit_video_job(self, payload: VideoPayload) -> VideoJobHandle:
        ...

    async def refresh_video_job(self, handle: VideoJobHandle) -> VideoJobHandle:
        ...


def to_gemini_parts(parts: List[ContentPart]) -> List[types.Part]:
    """Convert ordered content parts to google-genai Parts, keeping order."""
    gemini_parts = []
    for part in parts:
        if part.inline_data is not None:
            gemini_parts.append(types.Part(
                inline_data=types.Blob(
                    mime_type=part.inline_data.mime_type,
                    data=part.inline_data.data
                )
            ))
        elif part.text is not None:
            gemini_parts.append(types.Part.from_text(text=part.text))
    return gemini_parts


def operation_to_handle(operation: Any) -> VideoJobHandle:
    """Read completion state and primary video URI off a Veo operation."""
    video_uri = None
    error = None
    if getattr(operation, "done", False):
        error = getattr(operation, "error", None)
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        videos = getattr(response, "generated_videos", None) if response else None
        if videos:
            video = getattr(videos[0], "video", None)
            video_uri = getattr(video, "uri", None) if video else None
    return VideoJobHandle(
        name=getattr(operation, "name", None),
        done=bool(getattr(operation, "done", False)),
        video_uri=video_uri,
        error=str(error) if error else None,
        operation=operation,
    )


class GeminiBackend:
    """
    GenerativeBackend backed by the Gemini API.

    A new client is built for every call so a key selected after startup is
    used straight away.
    """

    def __init__(self, credentials: Optional[CredentialProvider] = None):
        self.credentials = credentials or EnvironmentCredentialProvider()

    @property
    def access_token(self) -> Optional[str]:
        return self.credentials.current_key()

    def _client(self) -> genai.Client:
        api_key = self.access_token
        if not api_key:
            raise MissingApiKeyError("GEMINI_API_KEY must be set in environment variables")
        return genai.Client(api_key=api_key)

    async def generate_content(self, payload: ImagePayload) -> Any:
        client = self._client()
        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(**payload.image_config()),
        )
        contents = [types.Content(role="user", parts=to_gemini_parts(payload.parts))]
        logger.debug(f"generate_content: model={payload.model}, parts={len(payload.parts)}, config={payload.image_config()}")
        try:
            return await client.aio.models.generate_content(
                model=payload.model, contents=contents, config=config
            )
        except genai_errors.APIError as e:
            raise BackendCallError(str(e), status_code=e.code) from e
        except httpx.HTTPError as e:
            raise BackendCallError(str(e)) from e

    async def submit_video_job(self, payload: VideoPayload) -> VideoJobHandle:
        client = self._client()
        config = types.GenerateVideosConfig(
            number_of_videos=payload.number_of_videos,
            resolution=payload.resolution.value,
            aspect_ratio=payload.aspect_ratio,
        )
        image = None
        if payload.image is not None:
            image = types.Image(image_bytes=payload.image.data, mime_type=payload.image.mime_type)
        try:
            operation = await client.aio.models.generate_videos(
                model=payload.model, prompt=payload.prompt, image=image, config=config
            )
        except genai_errors.APIError as e:
            raise BackendCallError(str(e), status_code=e.code) from e
        except httpx.HTTPError as e:
            raise BackendCallError(str(e)) from e
        return operation_to_handle(operation)

    async def refresh_video_job(self, handle: VideoJobHandle) -> VideoJobHandle:
        client = self._client()
        try:
            operation = await client.aio.operations.get(handle.operation)
        except genai_errors.APIError as e:
            raise BackendCallError(str(e), status_code=e.code) from e
        except httpx.HTTPError as e:
            raise BackendCallError(str(e)) from e
        return operation_to_handle(operation)


_default_backend: Optional[GeminiBackend] = None


def get_backend() -> GeminiBackend:
    """Process-wide Gemini backend."""
    global _default_backend
    if _default_backend is None:
        _default_backend = GeminiBackend()
    return _default_backend
