"""
Draw face detections and their match labels onto an image.

The tensor is round-tripped through Pillow: encoded to JPEG, opened as a
drawable image, annotated, and decoded back into a new int32 tensor. The
input tensor is left untouched.
"""

import io
import logging
from collections.abc import Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from youauth.face_recognition.detection import FaceDetection
from youauth.face_recognition.matching import MatchResult
from youauth.images import decode_image_bytes, encode_image, encode_jpeg

logger = logging.getLogger(__name__)


def draw_face_detections(
    matches: Sequence[MatchResult],
    detections: Sequence[FaceDetection],
    image: np.ndarray,
    color: str | tuple[int, int, int] = "blue",
    box_width: int = 1,
) -> np.ndarray:
    """
    Return a copy of image with a box and label drawn for every match.

    Args:
        matches: Results from match_all, aligned with detections
        detections: Results from detect_all for the same image
        image: RGB image tensor the detections came from
        color: Outline and text color
        box_width: Rectangle outline width in pixels

    Returns:
        New RGB int32 tensor of the same size

    Raises:
        ValueError: If matches and detections are not aligned
    """
    if len(matches) != len(detections):
        raise ValueError(
            f"Matches and detections not aligned ({len(matches)} vs {len(detections)})"
        )

    with Image.open(io.BytesIO(encode_jpeg(image))) as decoded:
        canvas = decoded.convert("RGB")

    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()

    for match, detection in zip(matches, detections):
        box = detection.box
        label = str(match)

        draw.rectangle(
            [(box.x, box.y), (box.right, box.bottom)],
            outline=color,
            width=box_width,
        )
        # Text sits just above the box, nudged right; clamp at the top edge
        text_bbox = draw.textbbox((0, 0), label, font=font)
        text_height = text_bbox[3] - text_bbox[1]
        draw.text((box.x + 10, max(0, box.y - 5 - text_height)), label, fill=color, font=font)

    logger.debug(f"Drew {len(matches)} detection(s)")
    return decode_image_bytes(encode_image(np.asarray(canvas), "PNG"))
