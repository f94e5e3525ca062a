"""Fetch, verify, and persist one release archive."""

import logging
from dataclasses import dataclass
from pathlib import Path

from service_loader.checksums import assert_sha256, compute_bytes_sha256, parse_checksum_text
from service_loader.errors import (
    ArchiveFetchError,
    ChecksumFetchError,
    ChecksumMismatch,
    ObjectFetchError,
    StreamReadError,
    WriteError,
)
from service_loader.object_keys import ObjectKeys
from service_loader.object_store import Credentials, ObjectStoreClient, get_object_store, read_object


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchRequest:
    """Immutable description of one archive to fetch and verify."""

    application: str
    tag: str
    os: str
    arch: str
    bucket: str
    endpoint: str
    credentials: Credentials | None = None
    expected_checksum: str | None = None

    @property
    def keys(self) -> ObjectKeys:
        return ObjectKeys.from_parts(self.application, self.tag, self.os, self.arch)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful fetch."""

    archive_path: Path
    sha256: str
    checksum_source: str


def resolve_expected_checksum(request: FetchRequest, store: ObjectStoreClient) -> str:
    """Return the override digest, or the first token of the remote checksum object."""
    if request.expected_checksum:
        log.debug("using caller-supplied sha256; skipping checksum object")
        return request.expected_checksum

    checksum_key = request.keys.checksum
    log.info(f"downloading checksum\n    {request.bucket}/{checksum_key}")
    try:
        payload = read_object(store, request.bucket, checksum_key)
    except (ObjectFetchError, StreamReadError) as err:
        raise ChecksumFetchError(f"can't download checksum from {request.bucket}/{checksum_key}") from err
    return parse_checksum_text(payload.decode("utf-8", errors="replace"))


def persist_archive(payload: bytes, destination: str | Path) -> Path:
    """Write bytes to destination, replacing it atomically via a `.part` file."""
    destination = Path(destination)
    part_fp = destination.with_name(f"{destination.name}.part")
    try:
        part_fp.write_bytes(payload)
        part_fp.replace(destination)
    except OSError as err:
        raise WriteError(f"failed to write archive to {destination} ({err})") from err
    finally:
        if part_fp.exists():
            part_fp.unlink()
    log.debug(f"wrote {len(payload):,} bytes to\n    {destination}")
    return destination


def fetch_release(
    request: FetchRequest,
    store: ObjectStoreClient | None = None,
    out_dir: str | Path | None = None,
) -> FetchResult:
    """Fetch the archive, verify its sha256, and persist it only on a match."""
    keys = request.keys
    if store is None:
        store = get_object_store(request.endpoint, credentials=request.credentials)

    # Materialize the archive once; the same buffer is digested and later written.
    log.info(f"downloading archive\n    {request.bucket}/{keys.archive}")
    try:
        archive = read_object(store, request.bucket, keys.archive)
    except ObjectFetchError as err:
        raise ArchiveFetchError(f"can't download archive from {request.bucket}/{keys.archive}") from err

    log.info("generating checksum")
    local_sha256 = compute_bytes_sha256(archive)

    expected_sha256 = resolve_expected_checksum(request, store)

    log.info("comparing checksums")
    try:
        assert_sha256(local_sha256, expected_sha256, key=keys.archive)
    except ChecksumMismatch:
        log.warning("FAIL")
        raise
    log.info("PASS")

    destination = Path(out_dir) if out_dir is not None else Path.cwd()
    archive_fp = destination / keys.archive
    log.info(f"saving archive to\n    {archive_fp}")
    persist_archive(archive, archive_fp)
    return FetchResult(
        archive_path=archive_fp,
        sha256=local_sha256,
        checksum_source="override" if request.expected_checksum else "remote",
    )
