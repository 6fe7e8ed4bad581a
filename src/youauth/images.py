"""
Image loading and saving.

Images travel through the package as int32 RGB arrays of shape (H, W, 3).
An image reference is either a file path or an inline base64 data URI; the
kind is decided once, by ImageSource.parse, when the reference enters.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from youauth.errors import ImageDecodeError, ImageLoadError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:image/\w+;base64,")


@dataclass(frozen=True)
class ImageSource:
    """A file path or a data URI, tagged by kind."""

    kind: Literal["path", "data_uri"]
    value: str

    @classmethod
    def parse(cls, ref: str | Path) -> ImageSource:
        if isinstance(ref, Path):
            return cls("path", str(ref))
        if DATA_URI_PATTERN.match(ref):
            return cls("data_uri", ref)
        return cls("path", ref)

    @property
    def is_data_uri(self) -> bool:
        return self.kind == "data_uri"


ImageRef = Union[ImageSource, str, Path, np.ndarray]


def decode_data_uri(uri: str) -> bytes:
    """Strip the ``data:image/...;base64,`` header and decode the payload (line breaks allowed)."""
    payload = "".join(DATA_URI_PATTERN.sub("", uri, count=1).split())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image payload: {e}") from e


def encode_data_uri(data: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode compressed image bytes into an RGB int32 array.

    Raises:
        ImageDecodeError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgb = img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise ImageDecodeError(f"Could not decode image data: {e}") from e
    return np.asarray(rgb, dtype=np.int32)


def resolve_path(path: str | Path, base_dir: str | Path | None = None) -> Path:
    """Resolve relative paths against base_dir; absolute paths are kept."""
    p = Path(path)
    if base_dir is not None and not p.is_absolute():
        p = Path(base_dir) / p
    return p


def load_image(ref: ImageRef, base_dir: str | Path | None = None) -> np.ndarray:
    """
    Load an image reference into an RGB int32 array.

    Args:
        ref: ImageSource, raw path/data URI string, Path, or decoded array
        base_dir: Directory that relative file paths resolve against

    Returns:
        Array of shape (height, width, 3), dtype int32

    Raises:
        ImageLoadError: If a file path does not resolve or cannot be read
        ImageDecodeError: If the image bytes are malformed
    """
    if isinstance(ref, np.ndarray):
        return _as_tensor(ref)

    source = ref if isinstance(ref, ImageSource) else ImageSource.parse(ref)
    if source.is_data_uri:
        return decode_image_bytes(decode_data_uri(source.value))

    path = resolve_path(source.value, base_dir)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageLoadError(f"Cannot read image {path}: {e}") from e
    logger.debug(f"Read {len(data)} bytes from {path}")
    return decode_image_bytes(data)


def _as_tensor(array: np.ndarray) -> np.ndarray:
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ImageDecodeError(f"Expected an (H, W, 3) image array, got shape {array.shape}")
    return np.asarray(array[:, :, :3], dtype=np.int32)


def to_uint8(tensor: np.ndarray) -> np.ndarray:
    """Contiguous uint8 view of an image tensor, as dlib and Pillow expect."""
    return np.ascontiguousarray(np.clip(tensor, 0, 255).astype(np.uint8))


def to_pil(tensor: np.ndarray) -> Image.Image:
    return Image.fromarray(to_uint8(tensor))


def encode_image(tensor: np.ndarray, fmt: str = "JPEG", quality: int = 92) -> bytes:
    bio = io.BytesIO()
    if fmt.upper() == "JPEG":
        to_pil(tensor).save(bio, format="JPEG", quality=quality)
    else:
        to_pil(tensor).save(bio, format=fmt)
    return bio.getvalue()


def encode_jpeg(tensor: np.ndarray, quality: int = 92) -> bytes:
    return encode_image(tensor, "JPEG", quality)


def _write_bytes(path: Path, data: bytes) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise ImageLoadError(f"Cannot write image {path}: {e}") from e
    logger.info(f"Saved {path}")
    return path


def save_image_jpeg(
    tensor: np.ndarray,
    file_name: str | Path,
    output_dir: str | Path | None = None,
    quality: int = 92,
) -> Path:
    """Encode an image tensor as JPEG and write it under output_dir."""
    return _write_bytes(resolve_path(file_name, output_dir), encode_jpeg(tensor, quality))


def save_image_file(
    file_name: str | Path,
    data_uri: str,
    output_dir: str | Path | None = None,
) -> Path:
    """Write the decoded payload of a data URI as-is (no re-encoding)."""
    return _write_bytes(resolve_path(file_name, output_dir), decode_data_uri(data_uri))
