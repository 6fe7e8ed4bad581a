"""
youauth - face enrollment and recognition helpers.

Builds labeled face descriptors from reference photos, detects faces in new
images, matches them against the references and draws the results.
"""

__version__ = "0.1.0"

from youauth.config import Settings
from youauth.descriptors import LabeledDescriptor, build_descriptors
from youauth.errors import (
    CaptureError,
    DescriptorFormatError,
    DescriptorValidationError,
    FaceNotFoundError,
    ImageDecodeError,
    ImageLoadError,
    YouAuthError,
)
from youauth.recognizer import FaceRecognizer

__all__ = [
    "__version__",
    "CaptureError",
    "DescriptorFormatError",
    "DescriptorValidationError",
    "FaceNotFoundError",
    "FaceRecognizer",
    "ImageDecodeError",
    "ImageLoadError",
    "LabeledDescriptor",
    "Settings",
    "YouAuthError",
    "build_descriptors",
]
