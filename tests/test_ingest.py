"""
Ingestion Boundary Tests
========================
"""

import json

import pytest

from surface_tracker.stream import RejectReason, SnapshotValidator
from surface_tracker.tracking import GridShape


@pytest.fixture
def validator():
    """Provide a 2x2 validator with a fixed clock."""
    return SnapshotValidator(GridShape(height=2, width=2), clock=lambda: 1000.0)


class TestAccepted:
    """Tests for messages that pass validation."""

    def test_bare_matrix_text(self, validator):
        result = validator.validate("[[1, 2], [3, 4]]")

        assert result.accepted
        assert result.reason is None
        assert result.snapshot.reading.weight == 10.0
        assert result.snapshot.timestamp == 1000.0
        assert result.snapshot.sequence == 1

    def test_envelope_with_timestamp(self, validator):
        message = json.dumps({"cells": [1, 2, 3, 4], "timestamp": 1707321234.5})

        result = validator.validate(message.encode("utf-8"))

        assert result.accepted
        assert result.snapshot.timestamp == 1707321234.5
        assert result.snapshot.reading.to_list() == [[1.0, 2.0], [3.0, 4.0]]

    def test_python_objects(self, validator):
        assert validator.validate([[0, 0], [0, 0]]).accepted
        assert validator.validate({"cells": [[0, 0], [0, 1]]}).accepted

    def test_sequence_counts_accepted_only(self, validator):
        validator.validate([[0, 0], [0, 0]])
        validator.validate("not json")
        result = validator.validate([[1, 1], [1, 1]])

        assert result.snapshot.sequence == 2


class TestRejected:
    """Tests for messages rejected at the boundary."""

    def test_malformed_json(self, validator):
        result = validator.validate("{cells: oops")

        assert not result.accepted
        assert result.reason == RejectReason.PARSE_ERROR
        assert validator.stats.parse_errors == 1

    def test_envelope_without_cells(self, validator):
        result = validator.validate({"timestamp": 5.0})

        assert result.reason == RejectReason.PARSE_ERROR

    def test_unsupported_payload_type(self, validator):
        result = validator.validate(42)

        assert result.reason == RejectReason.PARSE_ERROR

    def test_wrong_cell_count(self, validator):
        result = validator.validate([[1, 2, 3], [4, 5, 6]])

        assert result.reason == RejectReason.SHAPE_MISMATCH
        assert "4" in result.detail
        assert validator.stats.shape_rejects == 1

    def test_over_nested_matrix(self):
        validator = SnapshotValidator(GridShape(height=1, width=2))

        result = validator.validate("[[[1, 2]], [[3, 4]]]")

        assert result.reason == RejectReason.SHAPE_MISMATCH
        assert validator.stats.shape_rejects == 1
        assert validator.stats.rejected == 1

    def test_string_cells(self, validator):
        result = validator.validate({"cells": ["1", "2", "3", "4"]})

        assert result.reason == RejectReason.INVALID_WEIGHT

    def test_non_finite_weight(self, validator):
        result = validator.validate([[1e308, 1e308], [1e308, 1e308]])

        assert result.reason == RejectReason.INVALID_WEIGHT
        assert validator.stats.weight_rejects == 1

    def test_non_numeric_cell(self, validator):
        result = validator.validate({"cells": [1, 2, 3, "x"]})

        assert result.reason == RejectReason.INVALID_WEIGHT


class TestStats:
    """Tests for ingestion counters."""

    def test_counters(self, validator):
        validator.validate([[0, 0], [0, 0]])
        validator.validate("nope")
        validator.validate([1, 2, 3])

        stats = validator.stats.to_dict()

        assert stats == {
            "received": 3,
            "accepted": 1,
            "rejected": 2,
            "parse_errors": 1,
            "shape_rejects": 1,
            "weight_rejects": 0,
        }
