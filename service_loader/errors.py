"""Error types raised while fetching, verifying, and persisting release archives."""


class ServiceLoaderError(Exception):
    """Base class for all service-loader failures."""


class ObjectFetchError(ServiceLoaderError):
    """Raised by object store clients when an object cannot be retrieved."""

    def __init__(self, message: str, bucket: str = "", key: str = ""):
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class ObjectNotFound(ObjectFetchError):
    """The bucket or key does not exist in the store."""


class ObjectStoreConnectionError(ObjectFetchError):
    """The store could not be reached or refused the request."""


class ArchiveFetchError(ServiceLoaderError):
    """The release archive could not be fetched."""


class ChecksumFetchError(ServiceLoaderError):
    """The companion checksum object could not be fetched."""


ChecksumNotFound = ChecksumFetchError


class MalformedChecksumFile(ServiceLoaderError):
    """The checksum object holds no whitespace-delimited token."""


class ChecksumMismatch(ServiceLoaderError, ValueError):
    """Computed and expected digests differ; a data-integrity finding, not an I/O fault."""

    def __init__(self, key: str, expected: str, actual: str):
        super().__init__(f"checksum mismatch for {key}: expected {expected}, got {actual}")
        self.key = key
        self.expected = expected
        self.actual = actual


class WriteError(ServiceLoaderError):
    """The verified archive could not be written locally."""


class StreamReadError(ServiceLoaderError):
    """An object stream failed while being read."""
