"""
Best-effort local persistence for generated assets.

Callers may hand each produced asset to these helpers; the generation core
never calls them itself. Failures are logged and reported as None rather
than raised.
"""
import base64
import binascii
import mimetypes
import os
import secrets
import time
from typing import Optional, Tuple

import httpx

from config import Config
from image.models import GeneratedImage
from utils.logger import get_logger
from videos.models import GeneratedVideo

logger = get_logger("assets.services")


def decode_data_uri(uri: str, default_mime_type: str = "image/png") -> Tuple[bytes, str]:
    """Split a `data:<mime>;base64,<payload>` URI into bytes and MIME type."""
    mime_type = default_mime_type
    payload = uri
    if uri.startswith("data:") and "," in uri:
        header, payload = uri.split(",", 1)
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload in data URI: {e}")


def _asset_filename(extension: str) -> str:
    return f"gemini_{int(time.time() * 1000)}_{secrets.token_hex(2)}{extension}"


def save_binary_file(directory: str, file_name: str, data: bytes) -> Optional[str]:
    """Write bytes into directory, returning the path or None on failure."""
    try:
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, file_name)
        with open(path, "wb") as f:
            f.write(data)
        return path
    except OSError as e:
        logger.error(f"Failed to save file {file_name}: {e}")
        return None


def save_image_asset(image: GeneratedImage, directory: Optional[str] = None) -> Optional[str]:
    """Save a generated image under directory (defaults to ASSETS_DIR)."""
    directory = directory or Config.ASSETS_DIR
    extension = mimetypes.guess_extension(image.mime_type) or ".png"
    path = save_binary_file(directory, _asset_filename(extension), image.data)
    if path:
        logger.info(f"Saved image asset {image.id} to {path}")
    return path


async def download_video_asset(
    video: GeneratedVideo,
    directory: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Fetch a generated video from its URI and save it under directory."""
    directory = directory or os.path.join(Config.ASSETS_DIR, "videos")
    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=Config.VIDEO_DOWNLOAD_TIMEOUT_SECONDS, follow_redirects=True
            ) as http_client:
                response = await http_client.get(video.url)
        else:
            response = await client.get(video.url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch video {video.id}: {e}")
        return None

    logger.info(f"Fetched video: {len(response.content)} bytes")
    path = save_binary_file(directory, _asset_filename(".mp4"), response.content)
    if path:
        logger.info(f"Saved video asset {video.id} to {path}")
    return path
