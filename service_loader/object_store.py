"""Object store clients for S3-compatible services and local mirrors."""

import contextlib, io, logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO
from urllib.parse import unquote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from service_loader.errors import ObjectNotFound, ObjectStoreConnectionError, StreamReadError


DEFAULT_ENDPOINT = "s3.amazonaws.com"
DEFAULT_REGION = "us-east-1"
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Access key pair used to authenticate against the store."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


class ObjectStoreClient:
    """Abstract client that returns the byte stream of one stored object."""

    name = "base"

    def fetch(self, bucket: str, key: str) -> BinaryIO:
        """Return a readable binary stream for `bucket/key`."""
        raise NotImplementedError


def normalize_endpoint_url(endpoint: str) -> str:
    """Return an endpoint URL, defaulting bare hosts to HTTPS."""
    assert endpoint, "endpoint cannot be empty"
    if "://" in endpoint:
        return endpoint
    return f"https://{endpoint}"


def _build_s3_config(endpoint_url: str) -> Config:
    """Use path-style addressing everywhere except on AWS itself."""
    host = (urlparse(endpoint_url).hostname or "").lower()
    addressing_style = "auto" if host.endswith("amazonaws.com") else "path"
    return Config(s3={"addressing_style": addressing_style})


class S3ObjectStore(ObjectStoreClient):
    """Fetch objects from AWS S3 or an S3-compatible service such as MinIO."""

    name = "s3"

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        credentials: Credentials | None = None,
        region: str = DEFAULT_REGION,
        client=None,
    ):
        self.endpoint_url = normalize_endpoint_url(endpoint)
        if client is not None:
            self._client = client
            return

        # Credentials are passed explicitly; the core never reads them from the environment.
        if credentials is None:
            raise ValueError(f"credentials are required to build an S3 client for {self.endpoint_url}")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            config=_build_s3_config(self.endpoint_url),
        )

    def fetch(self, bucket: str, key: str) -> BinaryIO:
        """Issue GetObject and return the streaming body."""
        log.debug(f"GetObject s3://{bucket}/{key} via {self.endpoint_url}")
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as err:
            error_code = err.response.get("Error", {}).get("Code")
            if error_code in _NOT_FOUND_CODES:
                raise ObjectNotFound(f"object not found: {bucket}/{key}", bucket=bucket, key=key) from err
            raise ObjectStoreConnectionError(
                f"store rejected request for {bucket}/{key} ({error_code})", bucket=bucket, key=key
            ) from err
        except BotoCoreError as err:
            raise ObjectStoreConnectionError(
                f"unable to reach {self.endpoint_url} for {bucket}/{key} ({err})", bucket=bucket, key=key
            ) from err
        return response["Body"]


class FileObjectStore(ObjectStoreClient):
    """Serve objects from a local mirror laid out as `<root>/<bucket>/<key>`."""

    name = "file"

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()

    def fetch(self, bucket: str, key: str) -> BinaryIO:
        """Open the mirrored object for reading."""
        object_fp = self.root / bucket / key
        if not object_fp.is_file():
            raise ObjectNotFound(f"object not found: {object_fp}", bucket=bucket, key=key)
        try:
            return object_fp.open("rb")
        except OSError as err:
            raise ObjectStoreConnectionError(f"unable to open {object_fp} ({err})", bucket=bucket, key=key) from err


def get_object_store(
    endpoint: str,
    credentials: Credentials | None = None,
    region: str = DEFAULT_REGION,
) -> ObjectStoreClient:
    """Select an object store client from the endpoint scheme."""
    parsed = urlparse(endpoint if "://" in endpoint else f"https://{endpoint}")
    scheme = parsed.scheme.lower()
    if scheme == "file":
        root = Path(f"//{parsed.netloc}{unquote(parsed.path)}") if parsed.netloc else Path(unquote(parsed.path))
        return FileObjectStore(root)
    if scheme in {"http", "https"}:
        return S3ObjectStore(endpoint, credentials=credentials, region=region)
    raise ValueError(f"unable to select object store for endpoint scheme '{scheme}'")


def read_object(store: ObjectStoreClient, bucket: str, key: str, chunk_size: int = 1024 * 1024) -> bytes:
    """Fetch one object and drain its stream into an owned buffer."""
    stream = store.fetch(bucket, key)
    buffer = io.BytesIO()
    with contextlib.closing(stream):
        try:
            chunk = stream.read(chunk_size)
            while chunk:
                buffer.write(chunk)
                chunk = stream.read(chunk_size)
        except (OSError, BotoCoreError) as err:
            raise StreamReadError(f"failed reading {bucket}/{key} after {buffer.tell():,} bytes ({err})") from err
    log.debug(f"read {buffer.tell():,} bytes from {bucket}/{key}")
    return buffer.getvalue()
