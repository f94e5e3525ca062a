"""Tests for checksum utilities."""

import io

import pytest

from conftest import BrokenStream, HELLO_SHA256
from service_loader.checksums import (
    VerificationOutcome,
    assert_sha256,
    compute_bytes_sha256,
    compute_sha256,
    parse_checksum_text,
    verify_sha256,
)
from service_loader.errors import ChecksumMismatch, MalformedChecksumFile, StreamReadError


pytestmark = pytest.mark.unit


def test_compute_sha256_returns_hex_digest():
    """Verify digest format and value for a known payload."""
    digest = compute_sha256(io.BytesIO(b"hello"))
    assert isinstance(digest, str)
    assert len(digest) == 64
    assert digest == HELLO_SHA256
    assert digest == digest.lower()


def test_compute_sha256_is_chunk_size_independent():
    """Ensure small chunks produce the same digest as one large read."""
    payload = bytes(range(256)) * 100
    assert compute_sha256(io.BytesIO(payload), chunk_size=7) == compute_bytes_sha256(payload)


def test_compute_bytes_sha256_is_deterministic():
    """Ensure identical bytes always give identical digests."""
    assert compute_bytes_sha256(b"service-loader") == compute_bytes_sha256(b"service-loader")


def test_compute_sha256_wraps_stream_errors():
    """Ensure mid-read I/O failures surface as StreamReadError."""
    with pytest.raises(StreamReadError):
        compute_sha256(BrokenStream())


@pytest.mark.parametrize(
    "text, expected_token",
    [
        pytest.param("abc123  filename.tar.gz\n", "abc123", id="sha256sum_output"),
        pytest.param("abc123", "abc123", id="bare_digest"),
        pytest.param("\n\t abc123 \n", "abc123", id="surrounding_whitespace"),
        pytest.param("ABC123 *file.tar.gz", "ABC123", id="case_preserved"),
    ],
)
def test_parse_checksum_text_returns_first_token(text: str, expected_token: str):
    """Ensure only the first whitespace-delimited field is used."""
    assert parse_checksum_text(text) == expected_token


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("", id="empty"),
        pytest.param(" \n\t ", id="whitespace_only"),
    ],
)
def test_parse_checksum_text_rejects_empty_content(text: str):
    """Ensure checksum content without tokens is reported as malformed."""
    with pytest.raises(MalformedChecksumFile):
        parse_checksum_text(text)


@pytest.mark.parametrize(
    "expected_sha256, expected_outcome",
    [
        pytest.param(HELLO_SHA256, VerificationOutcome.PASS, id="matching_digest"),
        pytest.param(HELLO_SHA256[:-1] + "5", VerificationOutcome.FAIL, id="last_char_differs"),
        pytest.param(HELLO_SHA256.upper(), VerificationOutcome.FAIL, id="case_differs"),
        pytest.param("0" * 64, VerificationOutcome.FAIL, id="mismatching_digest"),
    ],
)
def test_verify_sha256_returns_expected_outcome(expected_sha256: str, expected_outcome: VerificationOutcome):
    """Check exact-match verification outcomes."""
    assert verify_sha256(HELLO_SHA256, expected_sha256) is expected_outcome


def test_assert_sha256_raises_mismatch_with_both_digests():
    """Ensure mismatches raise a distinct error carrying expected and actual digests."""
    with pytest.raises(ChecksumMismatch) as exc_info:
        assert_sha256(HELLO_SHA256, "0" * 64, key="svc.tar.gz")
    assert exc_info.value.expected == "0" * 64
    assert exc_info.value.actual == HELLO_SHA256
    assert "checksum mismatch" in str(exc_info.value)
