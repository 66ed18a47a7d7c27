"""Shared models for image and video generation."""
import base64
import binascii
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ImageInput(BaseModel):
    """Raw image bytes with their MIME type, as sent to the model."""
    mime_type: str = Field(..., description="Image MIME type (e.g., image/png, image/jpeg)")
    data: bytes = Field(..., description="Raw image bytes")


class ImageData(BaseModel):
    """Image data as it travels over HTTP."""
    mime_type: str = Field(..., description="Image MIME type (e.g., image/png, image/jpeg)")
    data: str = Field(..., description="Base64-encoded image data")

    @field_validator("data")
    @classmethod
    def _strip_data_uri_prefix(cls, value: str) -> str:
        # Clients often send the full data URI
        if value.startswith("data:") and "," in value:
            return value.split(",", 1)[1]
        return value

    def to_input(self) -> ImageInput:
        """Decode into an ImageInput, raising ValueError on bad base64."""
        try:
            raw = base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image data: {e}")
        return ImageInput(mime_type=self.mime_type, data=raw)


class ContentPart(BaseModel):
    """One entry of the ordered content sent to a generation call: an image or text."""
    inline_data: Optional[ImageInput] = None
    text: Optional[str] = None

    @classmethod
    def from_image(cls, image: ImageInput) -> "ContentPart":
        return cls(inline_data=image)

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(text=text)
