"""Resolve caller input and environment defaults into one immutable FetchRequest."""

import logging, os, platform, sys
from collections.abc import Mapping

from service_loader.loader import FetchRequest
from service_loader.object_store import DEFAULT_ENDPOINT, Credentials


log = logging.getLogger(__name__)

ACCESS_KEY_ID_ENV_VARS = ("SERVICE_LOADER_ACCESS_KEY_ID", "AWS_ACCESS_KEY_ID")
SECRET_ACCESS_KEY_ENV_VARS = ("SERVICE_LOADER_SECRET_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY")
OS_ENV_VARS = ("SERVICE_LOADER_OS", "GOOS")
ARCH_ENV_VARS = ("SERVICE_LOADER_ARCH", "GOARCH")

# Release archives use Go-style platform identifiers.
_MACHINE_TO_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


def resolve_env_default(env_vars: tuple[str, ...], environ: Mapping[str, str] | None = None) -> str | None:
    """Return the first non-empty value among env_vars."""
    environ = os.environ if environ is None else environ
    for env_var in env_vars:
        value = environ.get(env_var)
        if value:
            log.debug(f"using default from ${env_var}")
            return value
    return None


def get_host_os(platform_name: str | None = None) -> str:
    """Return the host operating system in release naming (linux, darwin, windows, ...)."""
    platform_name = sys.platform if platform_name is None else platform_name
    if platform_name.startswith("linux"):
        return "linux"
    if platform_name == "win32":
        return "windows"
    if platform_name.startswith("freebsd"):
        return "freebsd"
    return platform_name


def get_host_arch(machine: str | None = None) -> str:
    """Return the host architecture in release naming (amd64, arm64, 386, arm)."""
    machine = (platform.machine() if machine is None else machine).lower()
    return _MACHINE_TO_ARCH.get(machine, machine)


def _is_file_endpoint(endpoint: str) -> bool:
    return endpoint.lower().startswith("file://")


def resolve_fetch_request(
    application: str | None,
    tag: str | None,
    bucket: str | None,
    endpoint: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
    expected_checksum: str | None = None,
    os_name: str | None = None,
    arch: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> FetchRequest:
    """Fill unset values from the environment and host, then validate required fields."""
    if not bucket:
        raise ValueError("--bucket is required")

    endpoint = endpoint or DEFAULT_ENDPOINT
    credentials = None
    if not _is_file_endpoint(endpoint):
        access_key_id = access_key_id or resolve_env_default(ACCESS_KEY_ID_ENV_VARS, environ)
        secret_access_key = secret_access_key or resolve_env_default(SECRET_ACCESS_KEY_ENV_VARS, environ)
        if not access_key_id:
            raise ValueError("--id is required")
        if not secret_access_key:
            raise ValueError("--key is required")
        credentials = Credentials(access_key_id=access_key_id, secret_access_key=secret_access_key)

    if not application and not tag:
        raise ValueError("APP and TAG are required")
    if not tag:
        raise ValueError("TAG is required")
    if not application:
        raise ValueError("APP is required")

    request = FetchRequest(
        application=application,
        tag=tag,
        os=os_name or resolve_env_default(OS_ENV_VARS, environ) or get_host_os(),
        arch=arch or resolve_env_default(ARCH_ENV_VARS, environ) or get_host_arch(),
        bucket=bucket,
        endpoint=endpoint,
        credentials=credentials,
        expected_checksum=expected_checksum or None,
    )
    log.debug(f"resolved fetch request for {request.keys.base} from {request.bucket} on {request.endpoint}")
    return request
