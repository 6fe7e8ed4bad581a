"""Tests for matching detections against labeled descriptors."""

import numpy as np
import pytest

from youauth.descriptors import LabeledDescriptor
from youauth.errors import DescriptorValidationError
from youauth.face_recognition.detection import BoundingBox, FaceDetection
from youauth.face_recognition.matching import (
    UNKNOWN_LABEL,
    MatchResult,
    extract_known_labels,
    match_all,
)


def _vec(*head: float) -> np.ndarray:
    """128-d embedding whose first components are head, rest zero."""
    v = np.zeros(128)
    v[: len(head)] = head
    return v


def _detection(embedding: np.ndarray) -> FaceDetection:
    return FaceDetection(box=BoundingBox(0, 0, 10, 10), score=1.0, embedding=embedding)


@pytest.fixture
def descriptors() -> list[LabeledDescriptor]:
    return [
        LabeledDescriptor("alice", _vec(1.0)),
        LabeledDescriptor("bob", _vec(0.0, 1.0)),
    ]


class TestMatchAll:
    """Test match_all function."""

    def test_one_result_per_detection_in_order(self, descriptors):
        detections = [_detection(_vec(0.0, 0.9)), _detection(_vec(5.0)), _detection(_vec(1.1))]

        matches = match_all(detections, descriptors)

        assert [m.label for m in matches] == ["bob", UNKNOWN_LABEL, "alice"]

    def test_closest_descriptor_wins(self, descriptors):
        matches = match_all([_detection(_vec(0.9, 0.2))], descriptors, distance_threshold=0.6)

        assert matches[0].label == "alice"
        assert matches[0].distance == pytest.approx(np.hypot(0.1, 0.2), abs=1e-6)

    def test_beyond_threshold_is_unknown(self, descriptors):
        matches = match_all([_detection(_vec(3.0))], descriptors, distance_threshold=0.6)

        assert matches[0].label == UNKNOWN_LABEL
        assert matches[0].distance == pytest.approx(2.0, abs=1e-6)

    def test_distance_equal_to_threshold_is_unknown(self):
        refs = [LabeledDescriptor("alice", _vec(0.0))]

        matches = match_all([_detection(_vec(0.5))], refs, distance_threshold=0.5)

        assert matches[0].label == UNKNOWN_LABEL

    def test_tie_first_descriptor_wins(self):
        refs = [
            LabeledDescriptor("first", _vec(1.0)),
            LabeledDescriptor("second", _vec(-1.0)),
        ]

        matches = match_all([_detection(_vec(0.0))], refs, distance_threshold=2.0)

        assert matches[0].label == "first"

    def test_no_detections(self, descriptors):
        assert match_all([], descriptors) == []

    def test_empty_descriptors_raises(self):
        with pytest.raises(DescriptorValidationError, match="At least one"):
            match_all([_detection(_vec(1.0))], [])


class TestMatchResult:
    def test_str_rounds_distance(self):
        assert str(MatchResult("alice", 0.35212970923781933)) == "alice (0.35)"

    def test_unknown_str(self):
        assert str(MatchResult(UNKNOWN_LABEL, 0.7)) == "unknown (0.7)"

    def test_is_known(self):
        assert MatchResult("alice", 0.1).is_known
        assert not MatchResult(UNKNOWN_LABEL, 0.9).is_known


class TestExtractKnownLabels:
    """Test extract_known_labels function."""

    def test_filters_unknown_preserving_order(self):
        matches = [
            MatchResult("bob", 0.3),
            MatchResult(UNKNOWN_LABEL, 0.8),
            MatchResult("alice", 0.4),
            MatchResult("bob", 0.2),
        ]

        assert extract_known_labels(matches) == ["bob", "alice", "bob"]

    def test_all_unknown(self):
        assert extract_known_labels([MatchResult(UNKNOWN_LABEL, 1.0)]) == []

    def test_idempotent(self):
        matches = [MatchResult("a", 0.1), MatchResult(UNKNOWN_LABEL, 0.9), MatchResult("b", 0.2)]
        labels = extract_known_labels(matches)

        again = extract_known_labels(MatchResult(label, 0.0) for label in labels)

        assert again == labels
