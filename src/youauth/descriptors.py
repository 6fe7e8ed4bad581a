"""
Labeled face descriptors: build them from reference images and persist them.

Persisted format (JSON), one object per label:

    [
        {"label": "person1", "descriptors": [[0.01, -0.12, ...]]},
        {"label": "person2", "descriptors": [[...]]}
    ]
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from youauth.errors import DescriptorFormatError, DescriptorValidationError, FaceNotFoundError
from youauth.face_recognition.detection import detect_single
from youauth.face_recognition.models import FaceModels
from youauth.images import ImageRef, load_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class LabeledDescriptor:
    """A label and the embedding of that person's reference face."""

    label: str
    embedding: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "embedding", np.asarray(self.embedding, dtype=np.float32))


class DescriptorRecord(BaseModel):
    """One persisted entry: a label and a single embedding wrapped in a list."""

    label: str
    descriptors: list[list[float]] = Field(min_length=1)

    @field_validator("descriptors")
    @classmethod
    def non_empty_embedding(cls, v):
        if not v[0]:
            raise ValueError("embedding must not be empty")
        return v


_records_adapter = TypeAdapter(list[DescriptorRecord])


def _build_one(
    models: FaceModels,
    index: int,
    label: str,
    image: ImageRef,
    min_confidence: float,
    base_dir: str | Path | None,
    upsample: int,
    num_jitters: int,
) -> LabeledDescriptor | None:
    img = load_image(image, base_dir)
    try:
        detection = detect_single(models, img, min_confidence, upsample, num_jitters)
    except FaceNotFoundError:
        logger.error(f"No faces detected for label '{label}' (image #{index}), skipping")
        return None
    return LabeledDescriptor(label=label, embedding=detection.embedding)


def build_descriptors(
    models: FaceModels,
    labels: Sequence[str],
    images: Sequence[ImageRef],
    min_confidence: float = 0.8,
    base_dir: str | Path | None = None,
    upsample: int = 1,
    num_jitters: int = 1,
    max_workers: int = 4,
) -> list[LabeledDescriptor]:
    """
    Compute one labeled descriptor per reference image.

    Each image is expected to show the labeled person; if several faces are
    found the highest scoring one is used. Images are processed concurrently
    and results come back in input order.

    Args:
        models: Loaded FaceModels
        labels: Person names, aligned with images
        images: Paths, data URIs, ImageSource objects or decoded arrays
        min_confidence: Minimum detector score for the reference face
        base_dir: Directory that relative image paths resolve against
        upsample: Detector upsample count
        num_jitters: Embedding re-sample count
        max_workers: Thread pool size

    Returns:
        Descriptors in input order. Pairs with no detectable face are logged
        and left out, so the result can be shorter than labels (see
        missing_labels).

    Raises:
        DescriptorValidationError: If labels and images differ in length
        ImageLoadError: If a reference image cannot be read
        ImageDecodeError: If a reference image is malformed
    """
    if len(labels) != len(images):
        raise DescriptorValidationError(
            f"Labels and images not aligned! ({len(labels)} labels, {len(images)} images)"
        )
    if not labels:
        return []

    with ThreadPoolExecutor(max_workers=min(max_workers, len(labels))) as pool:
        futures = [
            pool.submit(
                _build_one,
                models,
                i,
                label,
                image,
                min_confidence,
                base_dir,
                upsample,
                num_jitters,
            )
            for i, (label, image) in enumerate(zip(labels, images))
        ]
        results = [f.result() for f in futures]

    descriptors = [r for r in results if r is not None]
    logger.info(f"Built {len(descriptors)}/{len(labels)} labeled descriptors")
    return descriptors


def missing_labels(labels: Sequence[str], descriptors: Sequence[LabeledDescriptor]) -> list[str]:
    """Labels with no descriptor in the build output, in input order."""
    built = [d.label for d in descriptors]
    missing = []
    for label in labels:
        if label in built:
            built.remove(label)
        else:
            missing.append(label)
    return missing


def serialize(descriptors: Sequence[LabeledDescriptor]) -> list[dict[str, Any]]:
    """Plain-JSON representation of descriptors (float32 values as Python floats)."""
    return [{"label": d.label, "descriptors": [d.embedding.tolist()]} for d in descriptors]


def deserialize(records: Any) -> list[LabeledDescriptor]:
    """
    Rebuild descriptors from the serialized structure.

    Raises:
        DescriptorFormatError: If records do not have the expected shape
    """
    try:
        parsed = _records_adapter.validate_python(records)
    except ValidationError as e:
        raise DescriptorFormatError(f"Invalid descriptor records: {e}") from e
    return [LabeledDescriptor(label=r.label, embedding=r.descriptors[0]) for r in parsed]


def dumps(descriptors: Sequence[LabeledDescriptor]) -> str:
    return json.dumps(serialize(descriptors))


def loads(text: str | bytes) -> list[LabeledDescriptor]:
    """Parse descriptors from a JSON string."""
    try:
        records = json.loads(text)
    except json.JSONDecodeError as e:
        raise DescriptorFormatError(f"Descriptor file is not valid JSON: {e}") from e
    return deserialize(records)


def save_descriptors(descriptors: Sequence[LabeledDescriptor], path: str | Path) -> Path:
    """Write descriptors as JSON for later use."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(descriptors))
    logger.info(f"Saved {len(descriptors)} descriptors to {path}")
    return path


def load_descriptors(path: str | Path) -> list[LabeledDescriptor]:
    """
    Read descriptors written by save_descriptors.

    Raises:
        FileNotFoundError: If path does not exist
        DescriptorFormatError: If the file content is malformed
    """
    path = Path(path)
    descriptors = loads(path.read_text())
    logger.info(f"Loaded {len(descriptors)} descriptors from {path}")
    return descriptors
