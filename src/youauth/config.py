"""
Configuration management using Pydantic for validation.

Supports loading from:
- YAML files (primary)
- Environment variables with YOUAUTH_ prefix
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecognitionSettings(BaseModel):
    """Face detection and matching configuration."""

    model: Literal["hog", "cnn"] = Field(
        default="hog",
        description="dlib face detector: 'hog' (CPU friendly) or 'cnn' (more accurate, GPU)",
    )
    min_confidence: float = Field(
        default=0.8,
        ge=0.0,
        description="Minimum detector score for a face to count, on the detector's own scale: "
        "HOG gives an SVM margin (0.0 keeps every face the detector finds), "
        "CNN gives an MMOD confidence. Higher means fewer, cleaner detections.",
    )
    distance_threshold: float = Field(
        default=0.6,
        gt=0.0,
        le=2.0,
        description="Euclidean distance below which a face matches a descriptor "
        "(lower = stricter). 0.6 is the usual value for dlib embeddings.",
    )
    upsample: int = Field(
        default=1,
        ge=0,
        le=4,
        description="How many times to upsample the image before detecting (finds smaller faces)",
    )
    num_jitters: int = Field(
        default=1,
        ge=1,
        description="Re-sample count when computing embeddings (higher = slower, more stable)",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        description="Threads used when building descriptors from several reference images",
    )


class StorageSettings(BaseModel):
    """Where images and descriptors are read from and written to."""

    images_dir: Path = Field(
        default=Path("./images"),
        description="Base directory that relative image paths resolve against",
    )
    output_dir: Path = Field(
        default=Path("./images"),
        description="Directory that saved images are written to",
    )
    descriptors_path: Path = Field(
        default=Path("./descriptors.json"),
        description="Default location of the persisted labeled descriptors",
    )
    jpeg_quality: int = Field(
        default=92,
        ge=1,
        le=100,
        description="JPEG quality for saved images",
    )

    @field_validator("images_dir", "output_dir", "descriptors_path", mode="before")
    @classmethod
    def parse_path(cls, v):
        """Convert string path to Path object."""
        if isinstance(v, str):
            return Path(v)
        return v


class CaptureSettings(BaseModel):
    """Camera stream constraints for still capture."""

    device: int | str = Field(
        default=0,
        description="OpenCV device index or stream URL",
    )
    width: int = Field(default=640, ge=16, description="Snapshot width in pixels")
    height: int = Field(default=480, ge=16, description="Snapshot height in pixels")


class Settings(BaseSettings):
    """
    Main application settings.

    Can be loaded from:
    - YAML file: Settings.from_yaml("config.yaml")
    - Environment variables: YOUAUTH_LOG_LEVEL=DEBUG, YOUAUTH_RECOGNITION__MODEL=cnn
    """

    model_config = SettingsConfigDict(
        env_prefix="YOUAUTH_",
        env_nested_delimiter="__",
        extra="ignore",  # Ignore unknown fields for forward compatibility
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    recognition: RecognitionSettings = Field(
        default_factory=RecognitionSettings,
        description="Face recognition settings",
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Image and descriptor storage settings",
    )
    capture: CaptureSettings = Field(
        default_factory=CaptureSettings,
        description="Camera capture settings",
    )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Settings":
        """
        Load settings from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save settings to a YAML file."""
        data = self.model_dump(mode="json")

        with open(Path(path), "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
