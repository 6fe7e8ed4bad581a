"""
FaceRecognizer: one object bundling settings and loaded models.

Wraps the module-level functions so callers can enroll, detect, match and
annotate without passing models and thresholds around.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path

import numpy as np

from youauth import descriptors as descriptor_store
from youauth import images
from youauth.config import Settings
from youauth.descriptors import LabeledDescriptor
from youauth.face_recognition import (
    FaceDetection,
    FaceModels,
    MatchResult,
    detect_all,
    extract_known_labels,
    load_models,
    match_all,
)
from youauth.images import ImageRef
from youauth.overlay import draw_face_detections

logger = logging.getLogger(__name__)


class FaceRecognizer:
    """Enroll reference faces and recognize them in new images."""

    def __init__(self, settings: Settings | None = None, models: FaceModels | None = None):
        """
        Args:
            settings: Thresholds and storage locations (defaults if None)
            models: Preloaded models; loaded on first use if None
        """
        self.settings = settings or Settings()
        self._models = models
        self._models_lock = threading.Lock()

    @property
    def min_confidence(self) -> float:
        return self.settings.recognition.min_confidence

    @property
    def distance_threshold(self) -> float:
        return self.settings.recognition.distance_threshold

    @property
    def models(self) -> FaceModels:
        if self._models is None:
            with self._models_lock:
                if self._models is None:
                    self._models = load_models(self.settings.recognition.model)
        return self._models

    def load_image(self, ref: ImageRef) -> np.ndarray:
        return images.load_image(ref, self.settings.storage.images_dir)

    def label_descriptors(
        self, labels: Sequence[str], ref_images: Sequence[ImageRef]
    ) -> list[LabeledDescriptor]:
        """Build labeled descriptors from reference images (see build_descriptors)."""
        rec = self.settings.recognition
        return descriptor_store.build_descriptors(
            self.models,
            labels,
            ref_images,
            min_confidence=rec.min_confidence,
            base_dir=self.settings.storage.images_dir,
            upsample=rec.upsample,
            num_jitters=rec.num_jitters,
            max_workers=rec.max_workers,
        )

    def detect(self, image: np.ndarray) -> list[FaceDetection]:
        rec = self.settings.recognition
        return detect_all(
            self.models,
            image,
            min_confidence=rec.min_confidence,
            upsample=rec.upsample,
            num_jitters=rec.num_jitters,
        )

    def get_matches(
        self,
        detections: Sequence[FaceDetection],
        labeled_descriptors: Sequence[LabeledDescriptor],
    ) -> list[MatchResult]:
        return match_all(detections, labeled_descriptors, self.distance_threshold)

    @staticmethod
    def get_matched_labels(matches: Iterable[MatchResult]) -> list[str]:
        return extract_known_labels(matches)

    def recognize(
        self, ref: ImageRef, labeled_descriptors: Sequence[LabeledDescriptor]
    ) -> tuple[list[FaceDetection], list[MatchResult]]:
        """Load an image, detect its faces and match them in one call."""
        detections = self.detect(self.load_image(ref))
        if not detections:
            return [], []
        return detections, self.get_matches(detections, labeled_descriptors)

    @staticmethod
    def load_descriptors(json_string: str | bytes) -> list[LabeledDescriptor]:
        return descriptor_store.loads(json_string)

    def save_descriptors(
        self, labeled_descriptors: Sequence[LabeledDescriptor], file_path: str | Path | None = None
    ) -> Path:
        return descriptor_store.save_descriptors(
            labeled_descriptors, file_path or self.settings.storage.descriptors_path
        )

    def save_image_file(self, file_name: str | Path, image_data: str) -> Path:
        return images.save_image_file(file_name, image_data, self.settings.storage.output_dir)

    def save_image_jpeg(self, tensor: np.ndarray, file_name: str | Path) -> Path:
        return images.save_image_jpeg(
            tensor,
            file_name,
            self.settings.storage.output_dir,
            quality=self.settings.storage.jpeg_quality,
        )

    @staticmethod
    def draw_face_detections(
        matches: Sequence[MatchResult],
        detections: Sequence[FaceDetection],
        tensor: np.ndarray,
    ) -> np.ndarray:
        return draw_face_detections(matches, detections, tensor)
