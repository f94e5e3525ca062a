"""Object key derivation for release archives and their checksum objects."""

from dataclasses import dataclass


ARCHIVE_SUFFIX = ".tar.gz"
CHECKSUM_SUFFIX = ".sha256"


def build_base_key(application: str, tag: str, os_name: str, arch: str) -> str:
    """Join the release identifiers into the shared key stem."""
    # Identifiers are joined verbatim; no character-set validation.
    return f"{application}_{tag}_{os_name}_{arch}"


def build_archive_key(application: str, tag: str, os_name: str, arch: str) -> str:
    return build_base_key(application, tag, os_name, arch) + ARCHIVE_SUFFIX


def build_checksum_key(application: str, tag: str, os_name: str, arch: str) -> str:
    return build_base_key(application, tag, os_name, arch) + CHECKSUM_SUFFIX


@dataclass(frozen=True)
class ObjectKeys:
    """Archive and checksum keys derived from one base string."""

    base: str
    archive: str
    checksum: str

    @classmethod
    def from_parts(cls, application: str, tag: str, os_name: str, arch: str) -> "ObjectKeys":
        base = build_base_key(application, tag, os_name, arch)
        return cls(base=base, archive=base + ARCHIVE_SUFFIX, checksum=base + CHECKSUM_SUFFIX)
