"""Tests for email normalization."""

from src.shared.validators.email import normalize_email


class TestNormalizeEmail:
    def test_lowercases_whole_address(self):
        assert normalize_email("Alice@Example.COM") == "alice@example.com"

    def test_strips_surrounding_whitespace(self):
        assert normalize_email("  a@example.com\n") == "a@example.com"

    def test_idempotent(self):
        assert normalize_email(normalize_email("A@B.io")) == "a@b.io"
