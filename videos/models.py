"""Video generation Pydantic models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from common.models import ImageData, ImageInput

# Used when only an input image is supplied
DEFAULT_IMAGE_PROMPT = "Animate this image"


class AspectRatio(str, Enum):
    """Video aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Resolution(str, Enum):
    """Video resolutions."""
    P720 = "720p"
    P1080 = "1080p"


class VideoGenerationRequest(BaseModel):
    """Everything needed to generate one video."""
    prompt: str = Field("", description="Text prompt for video generation")
    input_image: Optional[ImageInput] = Field(None, description="Optional image to animate")
    aspect_ratio: AspectRatio = Field(AspectRatio.LANDSCAPE, description="Video aspect ratio")

    @model_validator(mode="after")
    def _apply_prompt_fallback(self) -> "VideoGenerationRequest":
        if not self.prompt.strip():
            if self.input_image is None:
                raise ValueError("prompt is required unless an input image is supplied")
            self.prompt = DEFAULT_IMAGE_PROMPT
        return self


class VideoPayload(BaseModel):
    """Normalized video job submission for the backend."""
    model: str
    prompt: str
    number_of_videos: int = 1
    resolution: Resolution = Resolution.P720
    aspect_ratio: str
    image: Optional[ImageInput] = None


class VideoJobHandle(BaseModel):
    """
    Handle to an asynchronous video job.

    `operation` is the backend's own object and is passed back verbatim
    as the key when the job is refreshed.
    """
    name: Optional[str] = None
    done: bool = False
    video_uri: Optional[str] = None
    error: Optional[str] = None
    operation: Any = None


class GeneratedVideo(BaseModel):
    """One produced video, owned by the caller."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str = Field(..., description="Fetchable video URI including the access token")
    prompt: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    aspect_ratio: str
    mime_type: str = "video/mp4"


# ---------- HTTP models ----------

class GenerateVideoRequest(BaseModel):
    """Request model for video generation."""
    prompt: str = Field("", description="Text prompt for video generation")
    input_image: Optional[ImageData] = Field(None, description="Optional image to animate")
    aspect_ratio: AspectRatio = Field(AspectRatio.LANDSCAPE, description="Video aspect ratio")

    def to_generation_request(self) -> VideoGenerationRequest:
        return VideoGenerationRequest(
            prompt=self.prompt,
            input_image=self.input_image.to_input() if self.input_image else None,
            aspect_ratio=self.aspect_ratio,
        )


class GenerateVideoResponse(BaseModel):
    """Response model for video generation."""
    id: str
    video_url: str = Field(..., description="URL to access the generated video")
    prompt: str
    aspect_ratio: str
    created_at: datetime
    saved_path: Optional[str] = None
