"""Exceptions raised by the generation core."""
from typing import Optional

from fastapi import HTTPException
from pydantic import ValidationError

from common.error_messages import ErrorCode, format_error_detail, get_error_response


class GenerationError(Exception):
    """Base class for every failure the generation core surfaces."""

    error_code: ErrorCode = ErrorCode.GENERATION_FAILED


class NoImageDataError(GenerationError):
    """A generation call returned no inline image in any content part."""

    error_code = ErrorCode.NO_CONTENT_GENERATED


class NoVideoDataError(GenerationError):
    """A completed video job reported no retrievable video reference."""

    error_code = ErrorCode.NO_CONTENT_GENERATED


class BackendCallError(GenerationError):
    """Transport or service failure from the generative backend."""

    error_code = ErrorCode.GEMINI_API_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        if status_code == 429:
            self.error_code = ErrorCode.GEMINI_RATE_LIMIT


class BatchGenerationError(GenerationError):
    """
    One or more members of a concurrent image batch failed.

    `first_error` is the failure of the lowest-indexed call that failed.
    """

    error_code = ErrorCode.IMAGE_GENERATION_FAILED

    def __init__(self, first_error: BaseException, failures: int, count: int):
        super().__init__(f"{failures} of {count} image generation call(s) failed: {first_error}")
        self.first_error = first_error
        self.failures = failures
        self.count = count


class MissingApiKeyError(GenerationError):
    """No API key is available for a backend call."""

    error_code = ErrorCode.MISSING_API_KEY


class VideoJobTimeoutError(GenerationError):
    """A video job did not finish before its deadline."""

    error_code = ErrorCode.GEMINI_TIMEOUT


class VideoJobCancelledError(GenerationError):
    """The caller stopped waiting for a video job."""

    error_code = ErrorCode.GENERATION_CANCELLED


def to_http_exception(e: GenerationError) -> HTTPException:
    """Map a generation failure to a user-friendly HTTP error."""
    message, status_code = get_error_response(e.error_code)
    if status_code < 500:
        message = format_error_detail(e.error_code, str(e))
    return HTTPException(status_code=status_code, detail=message)


def to_bad_request(e: ValueError) -> HTTPException:
    """Map a rejected request body (bad parameters or undecodable image data) to a 400."""
    error_code = ErrorCode.INVALID_PARAMETER if isinstance(e, ValidationError) else ErrorCode.INVALID_IMAGE_DATA
    _, status_code = get_error_response(error_code)
    return HTTPException(status_code=status_code, detail=format_error_detail(error_code, str(e)))
