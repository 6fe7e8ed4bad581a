"""
Exception hierarchy for youauth.

Every error raised by the package derives from YouAuthError and from the
closest builtin, so callers can catch either.
"""


class YouAuthError(Exception):
    """Base class for all youauth errors."""


class DescriptorValidationError(YouAuthError, ValueError):
    """Inputs for building or matching descriptors are inconsistent."""


class DescriptorFormatError(YouAuthError, ValueError):
    """Persisted descriptors could not be parsed."""


class FaceNotFoundError(YouAuthError, LookupError):
    """No face was detected above the confidence threshold."""

    def __init__(self, message: str = "No faces detected.", label: str | None = None):
        super().__init__(message)
        self.label = label


class ImageLoadError(YouAuthError, OSError):
    """An image file could not be read or written."""


class ImageDecodeError(YouAuthError, ValueError):
    """Image bytes or a base64 payload are malformed."""


class CaptureError(YouAuthError, RuntimeError):
    """A still frame could not be taken from the camera stream."""
