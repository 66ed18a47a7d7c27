"""Image generation module."""
from image.models import (
    AspectRatio,
    ImageResolution,
    GenerationRequest,
    GeneratedImage,
)

__all__ = [
    "AspectRatio",
    "ImageResolution",
    "GenerationRequest",
    "GeneratedImage",
]
