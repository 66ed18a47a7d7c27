"""Utils module."""
from utils.logger import setup_logger, get_logger, app_logger, mask_api_keys

__all__ = [
    "setup_logger",
    "get_logger",
    "app_logger",
    "mask_api_keys",
]
