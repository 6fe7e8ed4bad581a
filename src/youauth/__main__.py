"""
Entry point for running youauth as a module.

Usage:
    python -m youauth enroll --label cap --image cap.jpg --output descriptors.json
    python -m youauth recognize --descriptors descriptors.json --image group.jpg
    python -m youauth recognize --image group.jpg --annotate group_annotated.jpg
    python -m youauth capture --output snapshot.jpg
"""

import argparse
import logging
import sys
from pathlib import Path

from youauth.capture import FaceCapture
from youauth.config import Settings
from youauth.descriptors import load_descriptors, missing_labels
from youauth.errors import YouAuthError
from youauth.recognizer import FaceRecognizer

logger = logging.getLogger(__name__)


def _cmd_enroll(args: argparse.Namespace, recognizer: FaceRecognizer) -> int:
    labeled = recognizer.label_descriptors(args.label, args.image)
    missing = missing_labels(args.label, labeled)
    if missing:
        logger.warning(f"No face found for: {', '.join(missing)}")
    if not labeled:
        print("Error: no descriptors could be built", file=sys.stderr)
        return 1

    path = recognizer.save_descriptors(labeled, args.output)
    print(f"Saved {len(labeled)} descriptor(s) to {path}")
    return 0 if not missing else 1


def _cmd_recognize(args: argparse.Namespace, recognizer: FaceRecognizer) -> int:
    descriptors_path = args.descriptors or recognizer.settings.storage.descriptors_path
    labeled = load_descriptors(descriptors_path)

    image = recognizer.load_image(args.image)
    detections = recognizer.detect(image)
    logger.info(f"Detected {len(detections)} face(s) in {args.image}")
    matches = recognizer.get_matches(detections, labeled) if detections else []

    for match in matches:
        print(match)

    if args.annotate:
        annotated = recognizer.draw_face_detections(matches, detections, image)
        recognizer.save_image_jpeg(annotated, args.annotate)

    labels = recognizer.get_matched_labels(matches)
    print(f"Matched labels: {labels}")
    return 0 if labels else 1


def _cmd_capture(args: argparse.Namespace, recognizer: FaceRecognizer) -> int:
    with FaceCapture(recognizer.settings.capture) as camera:
        if not camera.is_streaming:
            print("Error: camera is not available", file=sys.stderr)
            return 1
        data_uri = camera.take_picture(quality=recognizer.settings.storage.jpeg_quality)
    path = recognizer.save_image_file(args.output, data_uri)
    print(f"Saved snapshot to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="youauth",
        description="Enroll reference faces and recognize them in images",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: built-in settings + YOUAUTH_* env)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    enroll = sub.add_parser("enroll", help="Build labeled descriptors from reference images")
    enroll.add_argument("--label", "-l", action="append", required=True, help="Person label")
    enroll.add_argument(
        "--image", "-i", action="append", required=True, help="Reference image (one per label)"
    )
    enroll.add_argument("--output", "-o", type=Path, default=None, help="Descriptor JSON path")

    recognize = sub.add_parser("recognize", help="Match faces in an image")
    recognize.add_argument("--image", "-i", required=True, help="Target image")
    recognize.add_argument("--descriptors", "-d", type=Path, default=None)
    recognize.add_argument(
        "--annotate", "-a", default=None, help="Save a copy with boxes and labels drawn"
    )

    capture = sub.add_parser("capture", help="Save a still image from the camera")
    capture.add_argument("--output", "-o", default="capture.jpg", help="Output file name")

    return parser


COMMANDS = {
    "enroll": _cmd_enroll,
    "recognize": _cmd_recognize,
    "capture": _cmd_capture,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_yaml(args.config) if args.config else Settings()
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    recognizer = FaceRecognizer(settings)
    try:
        return COMMANDS[args.command](args, recognizer)
    except (YouAuthError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
