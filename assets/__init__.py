"""Assets module."""
from assets.services import (
    decode_data_uri,
    save_image_asset,
    download_video_asset
)

__all__ = [
    "decode_data_uri",
    "save_image_asset",
    "download_video_asset"
]
