# model loading
"""
Pretrained dlib models used for detection, landmarks and embeddings.

Weights ship with the face_recognition_models package and are loaded by the
first load_models() call. The handles are wrapped in a FaceModels instance
which is then passed to every detection call and never modified.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal

logger = logging.getLogger(__name__)

DetectorModel = Literal["hog", "cnn"]


@dataclass(frozen=True)
class FaceModels:
    """
    Loaded model handles.

    Attributes:
        detector: dlib HOG detector (has .run) or CNN MMOD detector (callable)
        pose_predictor: 68-point dlib shape predictor
        encoder: dlib ResNet face recognition model (128-d embeddings)
        model: Which detector kind is loaded
    """

    detector: Any
    pose_predictor: Any
    encoder: Any
    model: DetectorModel = "hog"

    @property
    def is_cnn(self) -> bool:
        return self.model == "cnn"


def load_models(model: DetectorModel = "hog") -> FaceModels:
    """
    Load the detector, landmark and recognition networks from disk.

    Args:
        model: 'hog' (CPU friendly) or 'cnn' (more accurate, benefits from CUDA)

    Returns:
        FaceModels ready for detection

    Raises:
        ValueError: If model is not 'hog' or 'cnn'
    """
    if model not in ("hog", "cnn"):
        raise ValueError(f"Unknown detector model: {model}. Supported models: 'hog', 'cnn'")

    # importing face_recognition.api builds every dlib model as module globals
    from face_recognition import api

    detector = api.cnn_face_detector if model == "cnn" else api.face_detector

    logger.info(f"Models loaded. (detector={model})")
    return FaceModels(
        detector=detector,
        pose_predictor=api.pose_predictor_68_point,
        encoder=api.face_encoder,
        model=model,
    )
