"""
Tests for digest and token derivation.
"""
import hashlib
import string

import pytest

from hashlink_app.services.token_strategies import (
    DualDigestTokenStrategy,
    build_token,
    clamp,
    digest,
)

HEX = set(string.hexdigits.lower())


class TestDigest:
    """Test the dual digest encoder"""

    def test_lengths_and_alphabet(self):
        hex256, hex512 = digest("https://example.com/page")

        assert len(hex256) == 64
        assert len(hex512) == 128
        assert set(hex256) <= HEX
        assert set(hex512) <= HEX

    def test_matches_hashlib_over_utf8_bytes(self):
        text = "https://example.com/ünïcode?q=✓"
        hex256, hex512 = digest(text)

        assert hex256 == hashlib.sha256(text.encode("utf-8")).hexdigest()
        assert hex512 == hashlib.sha512(text.encode("utf-8")).hexdigest()

    def test_empty_string(self):
        hex256, _ = digest("")
        assert hex256 == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestBuildToken:
    """Test token builder slicing and clamping"""

    def test_default_slice_gives_eight_characters(self):
        hex256, hex512 = digest("https://example.com/page")
        token = build_token(hex256, hex512, 4)

        assert len(token) == 8
        assert token == hex256[:4] + hex512[-4:]

    @pytest.mark.parametrize("slice_len,expected", [
        (-5, 2),
        (0, 2),
        (1, 2),
        (32, 64),
        (64, 128),
        (100, 164),
        (128, 192),
        (500, 192),
    ])
    def test_length_contract(self, slice_len, expected):
        hex256, hex512 = digest("https://example.com/")
        token = build_token(hex256, hex512, slice_len)

        assert len(token) == clamp(slice_len, 1, 64) + clamp(slice_len, 1, 128)
        assert len(token) == expected

    def test_full_slices_are_the_whole_digests(self):
        hex256, hex512 = digest("https://example.com/")
        assert build_token(hex256, hex512, 128) == hex256 + hex512

    def test_clamp(self):
        assert clamp(0, 1, 64) == 1
        assert clamp(10, 1, 64) == 10
        assert clamp(65, 1, 64) == 64


class TestDualDigestTokenStrategy:
    """Test the strategy the service uses by default"""

    def test_deterministic(self):
        strategy = DualDigestTokenStrategy(slice_len=4)

        assert strategy.generate("https://www.python.org") == strategy.generate("https://www.python.org")

    def test_different_slices_share_prefix(self):
        short = DualDigestTokenStrategy(slice_len=4).generate("https://www.python.org")
        longer = DualDigestTokenStrategy(slice_len=8).generate("https://www.python.org")

        assert longer[:4] == short[:4]
        assert longer[-4:] == short[-4:]

    def test_url_is_hashed_verbatim(self):
        strategy = DualDigestTokenStrategy(slice_len=16)

        # No normalization: trailing slash and scheme case change the token
        assert strategy.generate("https://example.com") != strategy.generate("https://example.com/")
        assert strategy.generate("https://example.com") != strategy.generate("HTTPS://example.com")

    def test_token_length_property(self):
        assert DualDigestTokenStrategy(slice_len=4).token_length == 8
        assert DualDigestTokenStrategy(slice_len=100).token_length == 164
