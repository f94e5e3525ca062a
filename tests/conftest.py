"""Pytest fixtures for service-loader tests."""

import hashlib, io, pathlib

import pytest

from service_loader.errors import ObjectNotFound
from service_loader.loader import FetchRequest
from service_loader.object_store import Credentials, ObjectStoreClient


HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
ARCHIVE_KEY = "svc_v1.0.0_linux_amd64.tar.gz"
CHECKSUM_KEY = "svc_v1.0.0_linux_amd64.sha256"


class FakeObjectStore(ObjectStoreClient):
    """In-memory object store that records every fetch."""

    name = "fake"

    def __init__(self, objects: dict[tuple[str, str], bytes] | None = None):
        self.objects = dict(objects or {})
        self.calls: list[tuple[str, str]] = []

    def fetch(self, bucket: str, key: str):
        self.calls.append((bucket, key))
        if (bucket, key) not in self.objects:
            raise ObjectNotFound(f"object not found: {bucket}/{key}", bucket=bucket, key=key)
        return io.BytesIO(self.objects[(bucket, key)])


class BrokenStream(io.RawIOBase):
    """Stream that returns some bytes and then fails like a dropped connection."""

    def __init__(self, head: bytes = b"hel"):
        self._head = head

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self._head:
            head, self._head = self._head, b""
            return head
        raise OSError("connection reset by peer")


class BrokenStreamStore(FakeObjectStore):
    """Fake store whose archive stream breaks mid-read."""

    def fetch(self, bucket: str, key: str):
        self.calls.append((bucket, key))
        return BrokenStream()


#===============================================================================
# pytest custom config------------
#===============================================================================


def pytest_report_header(config):
    """Show pytest invocation arguments in the test header."""
    return f"pytest arguments: {' '.join(config.invocation_params.args)}"


# -------------------
# ----- Fixtures -----
# -------------------
@pytest.fixture(scope="function")
def release_request() -> FetchRequest:
    """Request for the svc v1.0.0 linux/amd64 release."""
    return FetchRequest(
        application="svc",
        tag="v1.0.0",
        os="linux",
        arch="amd64",
        bucket="releases",
        endpoint="minio.local:9000",
        credentials=Credentials(access_key_id="test-id", secret_access_key="test-secret"),
    )


@pytest.fixture(scope="function")
def fake_store() -> FakeObjectStore:
    """Store holding the svc archive and a sha256sum-style checksum object."""
    return FakeObjectStore(
        {
            ("releases", ARCHIVE_KEY): b"hello",
            ("releases", CHECKSUM_KEY): f"{HELLO_SHA256}  {ARCHIVE_KEY}\n".encode("utf-8"),
        }
    )


@pytest.fixture(scope="function")
def mirror_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a local object store mirror with one release and its checksum."""
    bucket_dir = tmp_path / "mirror" / "releases"
    bucket_dir.mkdir(parents=True)
    archive_bytes = b"release-archive-bytes"
    (bucket_dir / ARCHIVE_KEY).write_bytes(archive_bytes)
    sha256 = hashlib.sha256(archive_bytes).hexdigest()
    (bucket_dir / CHECKSUM_KEY).write_text(f"{sha256}  {ARCHIVE_KEY}\n", encoding="utf-8")
    return tmp_path / "mirror"
