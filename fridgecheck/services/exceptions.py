"""
Error taxonomy for the scan-to-recipe pipeline.

Every failure the model client, image preprocessing or response extraction
can produce is a ScanError. The pipeline catches these and moves to a failed
state; they never escape start_analysis() / start_generation().
"""

from typing import Optional


class ScanError(Exception):
    """Base class for failures surfaced on a pipeline failed state."""

    message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoAPIKeyError(ScanError):
    """No API key was supplied."""

    message = "No API key configured. Please add your Claude API key in Settings."


class NoImageError(ScanError):
    """Analysis was requested before any image was captured."""

    message = "No image captured. Take or select a photo first."


class InvalidImageError(ScanError):
    """Image could not be decoded or encoded for transport."""

    message = "Could not process the image. Please try again."


class NetworkError(ScanError):
    """Transport-level failure talking to the model endpoint."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class HTTPError(ScanError):
    """Model endpoint answered with a non-2xx status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"API error: HTTP {status}: {body}")


class MalformedResponseError(ScanError):
    """2xx response whose envelope lacks content[0].text."""

    message = "Failed to parse response: Unexpected response structure"


class DecodingError(ScanError):
    """Extracted text is not valid JSON or does not match the expected shape."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to parse response: {detail}")


class InvalidStateError(Exception):
    """A commit operation was called before the pipeline produced its data."""

    pass
