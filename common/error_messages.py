"""
User-friendly error messages and status codes.

This module provides centralized error message definitions that are
user-friendly and avoid exposing technical implementation details.
"""
from typing import Tuple, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Validation Errors (400)
    INVALID_PARAMETER = "INVALID_PARAMETER"
    INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"

    # External API Errors (502, 503, 504)
    GEMINI_API_ERROR = "GEMINI_API_ERROR"
    GEMINI_TIMEOUT = "GEMINI_TIMEOUT"
    GEMINI_RATE_LIMIT = "GEMINI_RATE_LIMIT"

    # Generation Errors (500, 502)
    GENERATION_FAILED = "GENERATION_FAILED"
    NO_CONTENT_GENERATED = "NO_CONTENT_GENERATED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    GENERATION_CANCELLED = "GENERATION_CANCELLED"

    # Configuration Errors (500)
    MISSING_API_KEY = "MISSING_API_KEY"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# User-friendly error messages mapped to error codes
ERROR_MESSAGES = {
    ErrorCode.INVALID_PARAMETER: "One or more parameters are invalid. Please review your request and try again.",
    ErrorCode.INVALID_IMAGE_DATA: "The image data provided is invalid or corrupted. Please try with a different image.",

    ErrorCode.GEMINI_API_ERROR: "We're having trouble connecting to our AI service. Please try again in a few moments.",
    ErrorCode.GEMINI_TIMEOUT: "The AI service is taking too long to respond. Please try again with a simpler request.",
    ErrorCode.GEMINI_RATE_LIMIT: "Our AI service is currently experiencing high demand. Please try again in a few minutes.",

    ErrorCode.GENERATION_FAILED: "We couldn't complete the generation. Please try again with a different prompt.",
    ErrorCode.NO_CONTENT_GENERATED: "No content was generated. Please try rephrasing your request.",
    ErrorCode.IMAGE_GENERATION_FAILED: "Image generation failed. Please try again or adjust your prompt.",
    ErrorCode.GENERATION_CANCELLED: "The generation was cancelled before it finished.",

    ErrorCode.MISSING_API_KEY: "The service is not properly configured. Please contact support.",

    ErrorCode.UNKNOWN_ERROR: "Something unexpected happened. Please try again.",
}


# HTTP status codes for each error type
ERROR_STATUS_CODES = {
    ErrorCode.INVALID_PARAMETER: 400,
    ErrorCode.INVALID_IMAGE_DATA: 400,

    ErrorCode.GEMINI_API_ERROR: 502,
    ErrorCode.GEMINI_TIMEOUT: 504,
    ErrorCode.GEMINI_RATE_LIMIT: 503,

    ErrorCode.GENERATION_FAILED: 500,
    ErrorCode.NO_CONTENT_GENERATED: 502,
    ErrorCode.IMAGE_GENERATION_FAILED: 500,
    ErrorCode.GENERATION_CANCELLED: 499,

    ErrorCode.MISSING_API_KEY: 500,

    ErrorCode.UNKNOWN_ERROR: 500,
}


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None,
) -> Tuple[str, int]:
    """
    Get user-friendly error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional custom message to append to the standard message

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    if custom_message:
        message = f"{message} {custom_message}"

    return message, status_code


def format_error_detail(error_code: ErrorCode, detail: Optional[str] = None) -> str:
    """Format error detail for API response."""
    base_message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])

    if detail:
        return f"{base_message} ({detail})"

    return base_message
