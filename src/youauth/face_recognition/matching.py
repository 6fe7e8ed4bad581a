# face matching logic
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from youauth.errors import DescriptorValidationError
from youauth.face_recognition.detection import FaceDetection

if TYPE_CHECKING:
    from youauth.descriptors import LabeledDescriptor

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "unknown"


@dataclass(frozen=True)
class MatchResult:
    """Best label for one detected face and its distance."""

    label: str
    distance: float

    @property
    def is_known(self) -> bool:
        return self.label != UNKNOWN_LABEL

    def __str__(self) -> str:
        return f"{self.label} ({round(self.distance, 2)})"


def match_all(
    detections: Sequence[FaceDetection],
    descriptors: Sequence[LabeledDescriptor],
    distance_threshold: float = 0.6,
) -> list[MatchResult]:
    """
    Match each detection against the labeled descriptors.

    Distances are Euclidean (face_recognition.face_distance). The closest
    descriptor wins; on equal distances the earlier descriptor wins. A face
    whose closest distance is not below distance_threshold is labeled 'unknown'.

    Args:
        detections: Faces from detect_all
        descriptors: Reference descriptors (at least one)
        distance_threshold: Maximum distance for a match (exclusive)

    Returns:
        One MatchResult per detection, in detection order

    Raises:
        DescriptorValidationError: If descriptors is empty
    """
    if not descriptors:
        raise DescriptorValidationError("At least one labeled descriptor is required for matching")

    import face_recognition

    known = np.stack([d.embedding for d in descriptors])
    matches = []
    for detection in detections:
        distances = face_recognition.face_distance(known, detection.embedding)
        best = int(np.argmin(distances))
        best_distance = float(distances[best])

        if best_distance < distance_threshold:
            label = descriptors[best].label
        else:
            label = UNKNOWN_LABEL
        matches.append(MatchResult(label=label, distance=best_distance))

    logger.debug(f"Matched {len(matches)} face(s): {[str(m) for m in matches]}")
    return matches


def extract_known_labels(matches: Iterable[MatchResult]) -> list[str]:
    """Labels of matches that are not 'unknown', in order."""
    return [m.label for m in matches if m.label != UNKNOWN_LABEL]
