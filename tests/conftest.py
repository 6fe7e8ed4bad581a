"""Shared pytest fixtures for youauth tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest
from PIL import Image

from youauth.face_recognition.models import FaceModels


class FakeRect:
    """Stand-in for dlib.rectangle."""

    def __init__(self, left: int, top: int, right: int, bottom: int):
        self._left, self._top, self._right, self._bottom = left, top, right, bottom

    def left(self) -> int:
        return self._left

    def top(self) -> int:
        return self._top

    def right(self) -> int:
        return self._right

    def bottom(self) -> int:
        return self._bottom


class FakeHogDetector:
    """
    Deterministic stand-in for dlib's HOG detector.

    All-black images contain no face; any other image contains one face
    covering the central half of the frame with score 1.5.
    """

    def __init__(self, score: float = 1.5):
        self.score = score

    def run(self, img, upsample=0, adjust_threshold=0.0):
        if not img.any():
            return [], [], []
        h, w = img.shape[:2]
        return [FakeRect(w // 4, h // 4, 3 * w // 4, 3 * h // 4)], [self.score], [0]


class FakeEncoder:
    """Embedding is the top-left pixel's red value / 255 repeated 128 times."""

    def compute_face_descriptor(self, img, shape, num_jitters=1):
        return [img[0, 0, 0] / 255.0] * 128


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def fake_models() -> FaceModels:
    """FaceModels backed by deterministic fakes (no dlib weights needed)."""
    return FaceModels(
        detector=FakeHogDetector(),
        pose_predictor=MagicMock(name="pose_predictor"),
        encoder=FakeEncoder(),
        model="hog",
    )


def write_solid_png(path: Path, value: int, size: tuple[int, int] = (64, 48)) -> Path:
    """Write a solid-color PNG (lossless, so pixel values survive decoding)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, (value, value, value)).save(path, format="PNG")
    return path


@pytest.fixture
def make_png():
    """Factory fixture for write_solid_png."""
    return write_solid_png


@pytest.fixture
def images_dir(temp_dir: Path) -> Path:
    """Directory with reference images: two faces and one blank frame."""
    root = temp_dir / "images"
    write_solid_png(root / "alice.png", 51)
    write_solid_png(root / "bob.png", 204)
    write_solid_png(root / "blank.png", 0)
    return root


@pytest.fixture
def sample_image() -> np.ndarray:
    """Small RGB int32 image tensor."""
    img = np.zeros((48, 64, 3), dtype=np.int32)
    img[:, :, 0] = 120
    img[:, :, 1] = 80
    img[:, :, 2] = 40
    return img


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample configuration dictionary for testing."""
    return {
        "log_level": "DEBUG",
        "recognition": {
            "model": "hog",
            "min_confidence": 0.8,
            "distance_threshold": 0.6,
        },
        "storage": {
            "images_dir": "./images",
            "output_dir": "./out",
            "descriptors_path": "./descriptors.json",
        },
        "capture": {"device": 0, "width": 320, "height": 240},
    }


@pytest.fixture
def sample_config_yaml(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a temporary YAML config file."""
    import yaml

    config_path = temp_dir / "test_config.yaml"

    config_dict = sample_config_dict.copy()
    config_dict["storage"] = {
        "images_dir": str(temp_dir / "images"),
        "output_dir": str(temp_dir / "out"),
        "descriptors_path": str(temp_dir / "descriptors.json"),
    }

    with open(config_path, "w") as f:
        yaml.dump(config_dict, f)

    return config_path


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    yield

    root_logger.handlers = original_handlers
    root_logger.level = original_level
