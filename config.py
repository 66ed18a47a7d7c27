"""
Configuration module - loads all settings from environment variables.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
try:
    load_dotenv()
except Exception as e:
    print(f"Warning: Failed to load .env file: {e}")
    print("Continuing with environment variables or defaults...")


class Config:
    """Application configuration loaded from environment variables."""

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Safely parse integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid integer for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Safely parse float environment variable."""
        try:
            return float(os.getenv(key, str(default)))
        except (ValueError, TypeError) as e:
            print(f"Warning: Invalid float for {key}, using default {default}: {e}")
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Safely parse boolean environment variable."""
        try:
            value = os.getenv(key, str(default)).lower()
            return value in ("true", "1", "yes", "on")
        except Exception as e:
            print(f"Warning: Invalid boolean for {key}, using default {default}: {e}")
            return default

    # Gemini API
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    ENV_FILE: str = os.getenv("ENV_FILE", ".env")

    # Models: baseline image tier, higher-capability image tier, video
    IMAGE_MODEL_FAST: str = os.getenv("IMAGE_MODEL_FAST", "gemini-2.5-flash-image")
    IMAGE_MODEL_PRO: str = os.getenv("IMAGE_MODEL_PRO", "gemini-3-pro-image-preview")
    VIDEO_MODEL: str = os.getenv("VIDEO_MODEL", "veo-3.1-fast-generate-preview")
    VIDEO_RESOLUTION: str = os.getenv("VIDEO_RESOLUTION", "720p")

    # Video job polling (timeout of 0 means poll until the job finishes)
    VIDEO_POLL_INTERVAL_SECONDS: float = _get_float.__func__("VIDEO_POLL_INTERVAL_SECONDS", 5.0)
    VIDEO_POLL_TIMEOUT_SECONDS: float = _get_float.__func__("VIDEO_POLL_TIMEOUT_SECONDS", 0.0)
    VIDEO_DOWNLOAD_TIMEOUT_SECONDS: float = _get_float.__func__("VIDEO_DOWNLOAD_TIMEOUT_SECONDS", 300.0)

    # Request limits enforced at the HTTP boundary
    MAX_OUTPUT_COUNT: int = _get_int.__func__("MAX_OUTPUT_COUNT", 4)
    MAX_REFERENCE_IMAGES: int = _get_int.__func__("MAX_REFERENCE_IMAGES", 10)

    # File Storage
    ASSETS_DIR: str = os.getenv("ASSETS_DIR", "assets/generated")
    AUTO_SAVE_ASSETS: bool = _get_bool.__func__("AUTO_SAVE_ASSETS", False)

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = _get_int.__func__("PORT", 8000)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if cls.VIDEO_POLL_INTERVAL_SECONDS < 0:
            raise ValueError("VIDEO_POLL_INTERVAL_SECONDS must not be negative")

    @classmethod
    def video_poll_timeout(cls):
        """Default wall-clock bound for a video job, or None when unbounded."""
        if cls.VIDEO_POLL_TIMEOUT_SECONDS and cls.VIDEO_POLL_TIMEOUT_SECONDS > 0:
            return cls.VIDEO_POLL_TIMEOUT_SECONDS
        return None
