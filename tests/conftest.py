"""Shared pytest fixtures: fake Gemini backend, fake credential provider, response builders."""
import asyncio
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from common.credentials import CredentialGate
from common.models import ImageInput
from config import Config
from videos.models import VideoJobHandle

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"


# ============================================================================
# Response builders
# ============================================================================


def image_part(data: bytes = PNG_BYTES, mime_type: Optional[str] = "image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def text_part(text: str):
    return SimpleNamespace(inline_data=None, text=text)


def make_response(*parts):
    """Mimic a GenerateContentResponse with a single candidate."""
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def job(done: bool, video_uri: Optional[str] = None, error: Optional[str] = None, name: str = "operations/test"):
    return VideoJobHandle(name=name, done=done, video_uri=video_uri, error=error)


# ============================================================================
# Fakes
# ============================================================================


class FakeBackend:
    """
    In-memory GenerativeBackend.

    `image_responses[i]` answers the i-th generate_content call; an exception
    instance is raised instead of returned. Video polls consume `poll_handles`
    in order. `submit_delay` and `refresh_delay` stall the video calls.
    """

    def __init__(
        self,
        image_responses: Optional[List[Any]] = None,
        submit_handle: Optional[VideoJobHandle] = None,
        poll_handles: Optional[List[Any]] = None,
        token: Optional[str] = "test-key",
        delay: float = 0.01,
        submit_delay: float = 0.0,
        refresh_delay: float = 0.0,
    ):
        self.image_responses = list(image_responses or [])
        self.submit_handle = submit_handle
        self.poll_handles = list(poll_handles or [])
        self.token = token
        self.delay = delay
        self.submit_delay = submit_delay
        self.refresh_delay = refresh_delay

        self.payloads = []
        self.submitted = []
        self.refreshed = []
        self.active = 0
        self.max_active = 0

    @property
    def access_token(self) -> Optional[str]:
        return self.token

    async def generate_content(self, payload):
        index = len(self.payloads)
        self.payloads.append(payload)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1
        response = self.image_responses[index] if index < len(self.image_responses) else make_response(image_part())
        if isinstance(response, BaseException):
            raise response
        return response

    async def submit_video_job(self, payload):
        self.submitted.append(payload)
        if self.submit_delay:
            await asyncio.sleep(self.submit_delay)
        if isinstance(self.submit_handle, BaseException):
            raise self.submit_handle
        return self.submit_handle

    async def refresh_video_job(self, handle):
        self.refreshed.append(handle)
        if self.refresh_delay:
            await asyncio.sleep(self.refresh_delay)
        nxt = self.poll_handles.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt


class FakeCredentialProvider:
    """Provider whose selection flow takes a moment and then succeeds."""

    def __init__(self, selected: bool = False, key: str = "selected-key"):
        self.selected = selected
        self.key = key
        self.requests = 0

    def current_key(self):
        return self.key if self.selected else None

    async def has_credential(self) -> bool:
        return self.selected

    async def request_credential(self) -> None:
        self.requests += 1
        await asyncio.sleep(0.01)
        self.selected = True


class CountingGate(CredentialGate):
    def __init__(self, provider=None):
        super().__init__(provider)
        self.calls = 0

    async def ensure_authorized(self) -> None:
        self.calls += 1
        await super().ensure_authorized()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def png_image() -> ImageInput:
    return ImageInput(mime_type="image/png", data=PNG_BYTES)


@pytest.fixture
def gate() -> CountingGate:
    return CountingGate()


@pytest.fixture
def fast_polling(monkeypatch):
    """Poll without waiting and without a default deadline."""
    monkeypatch.setattr(Config, "VIDEO_POLL_INTERVAL_SECONDS", 0.0)
    monkeypatch.setattr(Config, "VIDEO_POLL_TIMEOUT_SECONDS", 0.0)
