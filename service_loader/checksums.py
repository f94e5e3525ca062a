"""Checksum helpers for release archives."""

import hashlib, io, logging
from enum import Enum
from typing import BinaryIO

from service_loader.errors import ChecksumMismatch, MalformedChecksumFile, StreamReadError


log = logging.getLogger(__name__)


class VerificationOutcome(Enum):
    """Result of comparing a computed digest against the expected one."""

    PASS = "pass"
    FAIL = "fail"


def compute_sha256(stream: BinaryIO, chunk_size: int = 1024 * 1024) -> str:
    """Compute the SHA256 digest of a binary stream in one forward pass."""
    assert chunk_size > 0, f"chunk_size must be positive, got {chunk_size}"

    # Stream in chunks so large archives never need a second copy.
    hasher = hashlib.sha256()
    try:
        chunk = stream.read(chunk_size)
        while chunk:
            hasher.update(chunk)
            chunk = stream.read(chunk_size)
    except OSError as err:
        raise StreamReadError(f"failed reading stream while computing sha256 ({err})") from err
    return hasher.hexdigest()


def compute_bytes_sha256(payload: bytes) -> str:
    """Compute the SHA256 digest of an in-memory buffer."""
    digest = compute_sha256(io.BytesIO(payload))
    log.debug(f"computed sha256 over {len(payload):,} bytes: {digest}")
    return digest


def parse_checksum_text(text: str) -> str:
    """Return the first whitespace-delimited token of checksum-utility output."""
    # `sha256sum` writes "<digest>  <filename>"; only the first field matters.
    tokens = text.split()
    if not tokens:
        raise MalformedChecksumFile("checksum content is empty")
    return tokens[0]


def verify_sha256(computed_sha256: str, expected_sha256: str) -> VerificationOutcome:
    """Return PASS when both digests are exactly equal (case-sensitive)."""
    outcome = VerificationOutcome.PASS if computed_sha256 == expected_sha256 else VerificationOutcome.FAIL
    log.debug(f"sha256 verification: computed={computed_sha256} expected={expected_sha256} outcome={outcome.name}")
    return outcome


def assert_sha256(computed_sha256: str, expected_sha256: str, key: str = "archive") -> None:
    """Raise ChecksumMismatch when the computed digest differs from the expected one."""
    if verify_sha256(computed_sha256, expected_sha256) is VerificationOutcome.FAIL:
        raise ChecksumMismatch(key, expected=expected_sha256, actual=computed_sha256)
