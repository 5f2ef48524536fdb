"""Tests for the RCM Insight exception hierarchy."""

from rcm_insight.exceptions import (
    ConfigurationError,
    GraphIntegrityError,
    GraphSourceError,
    InvalidConfigError,
    InvalidNodeError,
    MatrixDataError,
    RcmInsightError,
)


class TestHierarchy:
    def test_config_errors(self):
        assert issubclass(InvalidConfigError, ConfigurationError)
        assert issubclass(ConfigurationError, RcmInsightError)

    def test_data_errors(self):
        for cls in (GraphSourceError, InvalidNodeError, GraphIntegrityError):
            assert issubclass(cls, MatrixDataError)
        assert issubclass(MatrixDataError, RcmInsightError)


class TestMessages:
    def test_plain_message(self):
        assert str(RcmInsightError("boom")) == "boom"

    def test_details_appended(self):
        error = GraphSourceError("rcm.json", "invalid JSON")
        assert str(error) == "Cannot load graph source: rcm.json (source=rcm.json, reason=invalid JSON)"

    def test_invalid_node_without_id(self):
        error = InvalidNodeError(None, "missing id")
        assert error.message == "Invalid node: <missing id>"
        assert error.details["reason"] == "missing id"

    def test_integrity_error(self):
        error = GraphIntegrityError(["a", "b"])
        assert error.issues == ["a", "b"]
        assert "2 issue(s)" in str(error)
        assert error.details == {"first_issue": "a"}

    def test_invalid_config(self):
        error = InvalidConfigError("alert_limit", -1, "must be non-negative")
        assert error.key == "alert_limit"
        assert error.details["value"] == "-1"
