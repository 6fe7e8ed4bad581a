# face detection logic
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from youauth.errors import FaceNotFoundError
from youauth.face_recognition.models import FaceModels
from youauth.images import to_uint8

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Face rectangle in pixels, clipped to the image."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True, eq=False)
class FaceDetection:
    """One detected face: where it is, how confident, and its embedding."""

    box: BoundingBox
    score: float
    embedding: np.ndarray


def _raw_detections(models: FaceModels, img: np.ndarray, upsample: int) -> list[tuple]:
    """Run the detector and return (dlib_rect, score) pairs in detector order."""
    if models.is_cnn:
        return [(d.rect, float(d.confidence)) for d in models.detector(img, upsample)]
    rects, scores, _ = models.detector.run(img, upsample, 0.0)
    return [(r, float(s)) for r, s in zip(rects, scores)]


def _rect_to_box(rect, shape: tuple[int, ...]) -> BoundingBox | None:
    """Trim a dlib rectangle to image bounds. Returns None if nothing is left."""
    h, w = shape[:2]
    left = max(rect.left(), 0)
    top = max(rect.top(), 0)
    right = min(rect.right(), w)
    bottom = min(rect.bottom(), h)
    if right <= left or bottom <= top:
        return None
    return BoundingBox(x=left, y=top, width=right - left, height=bottom - top)


def detect_all(
    models: FaceModels,
    image: np.ndarray,
    min_confidence: float = 0.8,
    upsample: int = 1,
    num_jitters: int = 1,
) -> list[FaceDetection]:
    """
    Detect every face at or above min_confidence and compute its embedding.

    Args:
        models: Loaded FaceModels
        image: RGB image tensor (H, W, 3)
        min_confidence: Minimum detector score to keep a face (HOG margin or CNN confidence)
        upsample: Times to upsample before detecting (finds smaller faces)
        num_jitters: Re-samples when computing each embedding

    Returns:
        List of FaceDetection in detector order; empty if no faces found
    """
    img = to_uint8(image)
    detections: list[FaceDetection] = []

    for rect, score in _raw_detections(models, img, upsample):
        if score < min_confidence:
            logger.debug(f"Dropping face with score {score:.3f} < {min_confidence}")
            continue
        box = _rect_to_box(rect, img.shape)
        if box is None:
            continue
        shape = models.pose_predictor(img, rect)
        embedding = np.array(models.encoder.compute_face_descriptor(img, shape, num_jitters))
        detections.append(FaceDetection(box=box, score=score, embedding=embedding))

    logger.debug(f"Detected {len(detections)} face(s)")
    return detections


def detect_single(
    models: FaceModels,
    image: np.ndarray,
    min_confidence: float = 0.8,
    upsample: int = 1,
    num_jitters: int = 1,
) -> FaceDetection:
    """
    Return the highest scoring face in an image.

    Raises:
        FaceNotFoundError: If no face reaches min_confidence
    """
    detections = detect_all(models, image, min_confidence, upsample, num_jitters)
    if not detections:
        raise FaceNotFoundError("No faces detected.")
    # max() keeps the first of equal scores
    return max(detections, key=lambda d: d.score)
