"""
Still-image capture from a live camera stream.

Opens an OpenCV video device sized to the configured constraints and turns
the current frame into a JPEG data URI that load_image accepts.
"""

from __future__ import annotations

import logging
from typing import Any

from youauth.config import CaptureSettings
from youauth.errors import CaptureError
from youauth.images import encode_data_uri

# cv2 is an optional dependency (youauth[capture]) - imported lazily so the
# rest of the package works on headless installs without it.

logger = logging.getLogger(__name__)


def _import_cv2():
    try:
        import cv2
    except ImportError as e:
        raise ImportError(
            "opencv-python-headless is required for camera capture. "
            "Install with: pip install youauth[capture]"
        ) from e
    return cv2


class FaceCapture:
    """Camera stream that can take still pictures."""

    def __init__(self, constraints: CaptureSettings | None = None):
        self.constraints = constraints or CaptureSettings()
        self._capture: Any = None

    @property
    def is_streaming(self) -> bool:
        return self._capture is not None

    def start_stream(self) -> bool:
        """
        Open the camera device.

        Failures (no device, no permission, missing OpenCV) are logged and
        reported through the return value rather than raised.

        Returns:
            True if the stream is running
        """
        if self.is_streaming:
            return True
        try:
            cv2 = _import_cv2()
            cap = cv2.VideoCapture(self.constraints.device)
        except Exception as e:
            logger.error(f"Could not open camera {self.constraints.device}: {e}")
            return False

        if not cap.isOpened():
            logger.error(f"Camera {self.constraints.device} is not available")
            cap.release()
            return False

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.constraints.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.constraints.height)
        self._capture = cap
        logger.info(
            f"Camera {self.constraints.device} streaming at "
            f"{self.constraints.width}x{self.constraints.height}"
        )
        return True

    def take_picture(self, quality: int = 92) -> str:
        """
        Snapshot the current frame as a JPEG data URI.

        The frame is resized to the configured width and height.

        Raises:
            CaptureError: If no stream is running or the frame cannot be read
        """
        if not self.is_streaming:
            raise CaptureError("Camera stream is not started")

        cv2 = _import_cv2()
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CaptureError(f"Failed to read a frame from camera {self.constraints.device}")

        frame = cv2.resize(frame, (self.constraints.width, self.constraints.height))
        # OpenCV frames are BGR, which is what imencode expects
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise CaptureError("Failed to encode camera frame as JPEG")
        return encode_data_uri(buf.tobytes(), "image/jpeg")

    def stop_stream(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"Camera {self.constraints.device} released")

    def __enter__(self) -> FaceCapture:
        self.start_stream()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_stream()
