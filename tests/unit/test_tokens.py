"""Unit tests for token response decoding and fallback tokens."""

import re

import pytest

from checkout_explorer.exceptions import MalformedResponseError
from checkout_explorer.flow.tokens import (
    TokenShape,
    decode_token_response,
    synthesize_fallback_token,
)


class TestDecodeTokenResponse:
    """Tests for the two accepted token shapes."""

    def test_flat_shape(self):
        decoded = decode_token_response({"token": "abc"})
        assert decoded.value == "abc"
        assert decoded.shape == TokenShape.FLAT

    def test_nested_shape(self):
        decoded = decode_token_response({"data": {"checkoutToken": "xyz"}})
        assert decoded.value == "xyz"
        assert decoded.shape == TokenShape.NESTED

    def test_flat_wins_when_both_present(self):
        decoded = decode_token_response({"token": "flat", "data": {"checkoutToken": "nested"}})
        assert decoded.value == "flat"
        assert decoded.shape == TokenShape.FLAT

    def test_extra_fields_ignored(self):
        decoded = decode_token_response({"token": "abc", "_note": "demo"})
        assert decoded.value == "abc"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"data": {}},
            {"data": {"checkout_token": "snake"}},
            {"token": ""},
            {"token": None},
            [],
            "token",
            None,
        ],
    )
    def test_unrecognized_shapes(self, payload):
        """Anything else is a malformed response."""
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_token_response(payload)
        assert exc_info.value.status_code == 502


class TestSynthesizeFallbackToken:
    """Tests for locally synthesized tokens."""

    def test_format(self, checkout_id):
        token = synthesize_fallback_token(checkout_id)
        assert re.fullmatch(r"\d+-306d57d7-[0-9a-f]{8}", token)

    def test_starts_with_digits(self, checkout_id):
        assert synthesize_fallback_token(checkout_id)[0].isdigit()

    def test_deterministic_parts(self, checkout_id):
        token = synthesize_fallback_token(
            checkout_id,
            clock=lambda: 1700000000.123,
            suffix=lambda: "deadbeef",
        )
        assert token == "1700000000123-306d57d7-deadbeef"

    def test_two_calls_differ(self, checkout_id):
        """Same checkout, same instant: tokens still differ."""
        first = synthesize_fallback_token(checkout_id, clock=lambda: 1.0)
        second = synthesize_fallback_token(checkout_id, clock=lambda: 1.0)
        assert first != second

    def test_short_checkout_id(self):
        token = synthesize_fallback_token("abc", clock=lambda: 2.0, suffix=lambda: "00")
        assert token == "2000-abc-00"
