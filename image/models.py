"""Image generation Pydantic models."""
import base64
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from common.models import ContentPart, ImageData, ImageInput
from config import Config


class AspectRatio(str, Enum):
    """Image aspect ratios."""
    SQUARE = "1:1"
    STANDARD = "4:3"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    CUSTOM = "CUSTOM"


class ImageResolution(str, Enum):
    """Image resolution tiers, lowest first."""
    RES_1K = "1K"
    RES_2K = "2K"
    RES_4K = "4K"

    @property
    def is_baseline(self) -> bool:
        return self is ImageResolution.RES_1K


class GenerationRequest(BaseModel):
    """Everything needed to generate one batch of images."""
    prompt: str = Field("", description="Text prompt")
    aspect_ratio: AspectRatio = Field(AspectRatio.SQUARE, description="Aspect ratio, or CUSTOM with width/height")
    width: Optional[int] = Field(None, gt=0, description="Custom width in pixels")
    height: Optional[int] = Field(None, gt=0, description="Custom height in pixels")
    resolution: ImageResolution = Field(ImageResolution.RES_1K, description="Resolution tier")
    reference_images: List[ImageInput] = Field(default_factory=list, description="Ordered reference images")
    context_image: Optional[ImageInput] = Field(None, description="Source image for edit/upscale flows")
    is_editing: bool = Field(False, description="Edit/upscale mode")

    @model_validator(mode="after")
    def _check_inputs(self) -> "GenerationRequest":
        if not self.prompt and self.context_image is None:
            raise ValueError("prompt is required unless a context image is supplied")
        if len(self.reference_images) > Config.MAX_REFERENCE_IMAGES:
            raise ValueError(f"at most {Config.MAX_REFERENCE_IMAGES} reference images are allowed")
        return self


class ImagePayload(BaseModel):
    """Normalized content-generation request for the backend."""
    model: str
    parts: List[ContentPart]
    aspect_ratio: str
    image_size: Optional[str] = None

    def image_config(self) -> dict:
        config = {"aspect_ratio": self.aspect_ratio}
        if self.image_size:
            config["image_size"] = self.image_size
        return config


class GeneratedImage(BaseModel):
    """One produced image, owned by the caller."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    mime_type: str = "image/png"
    data: bytes
    prompt: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    aspect_ratio: str
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    @property
    def url(self) -> str:
        """Inline data URI, displayable as-is."""
        return f"data:{self.mime_type};base64,{self.base64_data}"


# ---------- HTTP models ----------

class GenerateImagesRequest(BaseModel):
    """Request model for batched image generation."""
    prompt: str = Field("", description="Text prompt")
    count: int = Field(1, ge=1, le=Config.MAX_OUTPUT_COUNT, description="Number of images to generate")
    aspect_ratio: AspectRatio = Field(AspectRatio.SQUARE, description="Aspect ratio")
    width: Optional[int] = Field(None, gt=0, description="Custom width (CUSTOM aspect ratio only)")
    height: Optional[int] = Field(None, gt=0, description="Custom height (CUSTOM aspect ratio only)")
    resolution: ImageResolution = Field(ImageResolution.RES_1K, description="Resolution tier")
    reference_images: List[ImageData] = Field(
        default_factory=list, max_length=Config.MAX_REFERENCE_IMAGES, description="Reference images"
    )
    context_image: Optional[ImageData] = Field(None, description="Context image for edit/upscale")
    is_editing: bool = Field(False, description="Edit/upscale mode")

    def to_generation_request(self) -> GenerationRequest:
        return GenerationRequest(
            prompt=self.prompt,
            aspect_ratio=self.aspect_ratio,
            width=self.width,
            height=self.height,
            resolution=self.resolution,
            reference_images=[img.to_input() for img in self.reference_images],
            context_image=self.context_image.to_input() if self.context_image else None,
            is_editing=self.is_editing,
        )


class UpscaleImageRequest(BaseModel):
    """Request model for upscaling a previously generated image."""
    image: ImageData = Field(..., description="Image to upscale")
    prompt: str = Field("", description="Prompt that produced the image")
    aspect_ratio: str = Field(AspectRatio.SQUARE.value, description="Aspect ratio the image was produced with")
    width: Optional[int] = Field(None, gt=0)
    height: Optional[int] = Field(None, gt=0)


class ImageAssetResponse(BaseModel):
    id: str
    url: str
    mime_type: str
    prompt: str
    created_at: datetime
    aspect_ratio: str
    width: Optional[int] = None
    height: Optional[int] = None
    saved_path: Optional[str] = None

    @classmethod
    def from_asset(cls, asset: GeneratedImage, saved_path: Optional[str] = None) -> "ImageAssetResponse":
        return cls(
            id=asset.id,
            url=asset.url,
            mime_type=asset.mime_type,
            prompt=asset.prompt,
            created_at=asset.created_at,
            aspect_ratio=asset.aspect_ratio,
            width=asset.width,
            height=asset.height,
            saved_path=saved_path,
        )


class GenerateImagesResponse(BaseModel):
    images: List[ImageAssetResponse]
