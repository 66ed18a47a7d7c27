"""Video generation services - Gemini Veo job submission and polling."""
import asyncio
from typing import Optional

from common.backend import GenerativeBackend, get_backend
from common.credentials import CredentialGate, get_credential_gate
from common.exceptions import (
    BackendCallError,
    NoVideoDataError,
    VideoJobCancelledError,
    VideoJobTimeoutError,
)
from config import Config
from utils.logger import get_logger
from videos.models import (
    GeneratedVideo,
    Resolution,
    VideoGenerationRequest,
    VideoJobHandle,
    VideoPayload,
)

logger = get_logger("videos.services")


def select_video_model() -> str:
    """Single video-capable model."""
    return Config.VIDEO_MODEL


def build_video_payload(request: VideoGenerationRequest) -> VideoPayload:
    """Build the Veo job submission for a request."""
    return VideoPayload(
        model=select_video_model(),
        prompt=request.prompt,
        number_of_videos=1,
        resolution=Resolution(Config.VIDEO_RESOLUTION),
        aspect_ratio=request.aspect_ratio.value,
        image=request.input_image,
    )


def append_access_token(uri: str, token: Optional[str]) -> str:
    """
    Make a video URI fetchable on its own by adding the API key.

    Uses `&key=` when the URI already carries a query string, `?key=`
    otherwise.
    """
    if not token:
        logger.warning("No access token available, returning video URI without key")
        return uri
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}key={token}"


async def _pause(seconds: float, cancel_event: Optional[asyncio.Event]) -> None:
    """Sleep between polls, waking early and raising if the caller cancels."""
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return
    raise VideoJobCancelledError("Video job polling cancelled by caller")


async def _bounded(call, deadline: Optional[float], cancel_event: Optional[asyncio.Event], what: str):
    """
    Await a backend call, giving up at `deadline` (loop time) or when
    `cancel_event` is set, whichever comes first.
    """
    if cancel_event is not None and cancel_event.is_set():
        call.close()
        raise VideoJobCancelledError(f"{what} cancelled by caller")

    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(call)
    waiters = {task}
    if cancel_event is not None:
        waiters.add(asyncio.ensure_future(cancel_event.wait()))
    remaining = None if deadline is None else max(deadline - loop.time(), 0)

    try:
        done, _ = await asyncio.wait(waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            if not waiter.done():
                waiter.cancel()

    if task in done:
        return task.result()
    if done:
        raise VideoJobCancelledError(f"{what} cancelled by caller")
    raise VideoJobTimeoutError(f"{what} did not return before the deadline")


async def drive_video_job(
    handle: VideoJobHandle,
    backend: GenerativeBackend,
    poll_interval: Optional[float] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> str:
    """
    Poll a submitted video job until it completes and return its video URI.

    Args:
        handle: Handle returned by job submission
        backend: Backend used to refresh the handle
        poll_interval: Seconds between polls (defaults to config)
        timeout: Wall-clock bound in seconds, covering pauses and in-flight
            polls; None polls indefinitely
        cancel_event: Set it to stop polling, even mid-poll; the backend job
            keeps running

    Raises:
        VideoJobTimeoutError, VideoJobCancelledError, BackendCallError, NoVideoDataError
    """
    interval = Config.VIDEO_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None

    poll_count = 0
    while not handle.done:
        if cancel_event is not None and cancel_event.is_set():
            raise VideoJobCancelledError("Video job polling cancelled by caller")
        wait = interval
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise VideoJobTimeoutError(
                    f"Video job {handle.name} not finished after {poll_count} poll(s) within {timeout}s"
                )
            wait = min(interval, remaining)
        await _pause(wait, cancel_event)
        poll_count += 1
        logger.info(f"...Generating... (poll #{poll_count})")
        handle = await _bounded(
            backend.refresh_video_job(handle), deadline, cancel_event, f"Poll #{poll_count} of video job {handle.name}"
        )

    logger.info(f"Video job {handle.name} completed after {poll_count} polls")

    if handle.error:
        raise BackendCallError(f"Video job failed: {handle.error}")
    if not handle.video_uri:
        raise NoVideoDataError("No video URI in response")
    return handle.video_uri


async def generate_video(
    request: VideoGenerationRequest,
    backend: Optional[GenerativeBackend] = None,
    gate: Optional[CredentialGate] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> GeneratedVideo:
    """
    Entry point for video generation.

    Video models are always metered, so the credential gate runs first. The
    timeout (default from VIDEO_POLL_TIMEOUT_SECONDS) and cancel_event cover
    submission and polling together. No retries: a failure on submission or
    on any poll is logged and re-raised.
    """
    backend = backend or get_backend()
    gate = gate or get_credential_gate()
    if timeout is None:
        timeout = Config.video_poll_timeout()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None

    try:
        await gate.ensure_authorized()
        payload = build_video_payload(request)
        logger.info(
            f"Submitting video job: model={payload.model}, aspect_ratio={payload.aspect_ratio}, "
            f"input_image={'yes' if payload.image else 'no'}"
        )
        handle = await _bounded(backend.submit_video_job(payload), deadline, cancel_event, "Video job submission")
        logger.info(f"Video job started: {handle.name or 'unknown'}")
        remaining = max(deadline - loop.time(), 0) if deadline is not None else None
        video_uri = await drive_video_job(handle, backend, timeout=remaining, cancel_event=cancel_event)
    except Exception as e:
        logger.error(f"Video generation failed: {e}")
        raise

    logger.info(f"Video generated successfully with URI: {video_uri}")
    return GeneratedVideo(
        url=append_access_token(video_uri, backend.access_token),
        prompt=request.prompt,
        aspect_ratio=request.aspect_ratio.value,
    )
