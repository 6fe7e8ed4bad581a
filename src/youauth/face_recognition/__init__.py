"""
Face detection and matching on top of dlib / face_recognition.

- models: load the pretrained networks once
- detection: find faces and compute 128-d embeddings
- matching: label faces by nearest reference descriptor
"""

from youauth.face_recognition.detection import (
    BoundingBox,
    FaceDetection,
    detect_all,
    detect_single,
)
from youauth.face_recognition.matching import (
    UNKNOWN_LABEL,
    MatchResult,
    extract_known_labels,
    match_all,
)
from youauth.face_recognition.models import FaceModels, load_models

__all__ = [
    "BoundingBox",
    "FaceDetection",
    "FaceModels",
    "MatchResult",
    "UNKNOWN_LABEL",
    "detect_all",
    "detect_single",
    "extract_known_labels",
    "load_models",
    "match_all",
]
