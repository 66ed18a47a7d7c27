"""Video generation module."""
from videos.models import (
    AspectRatio,
    VideoGenerationRequest,
    GeneratedVideo,
)

__all__ = [
    "AspectRatio",
    "VideoGenerationRequest",
    "GeneratedVideo",
]
