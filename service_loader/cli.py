"""Command line interface for service-loader."""

import argparse, logging, sys
from pathlib import Path

from service_loader.config import resolve_fetch_request
from service_loader.errors import ChecksumMismatch
from service_loader.loader import fetch_release
from service_loader.object_store import DEFAULT_ENDPOINT


log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CHECKSUM_MISMATCH = 3

DESCRIPTION = (
    "Load release archives from an Amazon S3 or MinIO bucket and validate them against "
    "the sha256 checksum stored alongside."
)


def _resolve_log_level(args: argparse.Namespace) -> int:
    """Resolve effective logging level from explicit level or verbosity flags."""
    if args.log_level is not None:
        return getattr(logging, args.log_level)

    # Start from INFO, then apply -v and -q offsets with DEBUG/ERROR clamp.
    level = logging.INFO - (10 * int(args.verbose)) + (10 * int(args.quiet))
    return max(logging.DEBUG, min(logging.ERROR, level))


def _configure_logging(args: argparse.Namespace) -> None:
    """Configure stdlib logging using Python default handler routing."""
    effective_level = _resolve_log_level(args)
    root_logger = logging.getLogger()
    root_logger.setLevel(effective_level)
    if not root_logger.handlers:
        logging.basicConfig(level=effective_level)


def main_cli(args: argparse.Namespace) -> int:
    """Fetch, verify, and save the archive selected by parsed arguments."""
    request = resolve_fetch_request(
        application=args.app,
        tag=args.tag,
        bucket=args.bucket,
        endpoint=args.endpoint,
        access_key_id=args.id,
        secret_access_key=args.key,
        expected_checksum=args.sha,
        os_name=args.os,
        arch=args.arch,
    )
    result = fetch_release(request, out_dir=args.out_dir)
    print(result.archive_path)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Run the service-loader CLI and return an exit code."""
    args = _parse_arguments(argv)
    _configure_logging(args)
    try:
        return main_cli(args)
    except ChecksumMismatch as err:
        log.error(f"{err}")
        return EXIT_CHECKSUM_MISMATCH
    except ValueError as err:
        # Missing or invalid configuration.
        log.error(f"{err}")
        _build_parser().print_usage(sys.stderr)
        return EXIT_USAGE
    except Exception as err:
        log.error(f"{err}")
        log.debug("unhandled CLI exception", exc_info=True)
        return EXIT_FAILURE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="service-loader", description=DESCRIPTION)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease logging verbosity (repeatable).",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default=None,
        help="Explicit log level override.",
    )
    parser.add_argument("app", nargs="?", default=None, help="Application to load.")
    parser.add_argument("tag", nargs="?", default=None, help="Release tag to load.")
    parser.add_argument("--bucket", default=None, help="S3/MinIO bucket where the releases exist.")
    parser.add_argument(
        "--id",
        default=None,
        help="Access key id for the S3/MinIO service. Defaults to $AWS_ACCESS_KEY_ID.",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Secret access key for the S3/MinIO service. Defaults to $AWS_SECRET_ACCESS_KEY.",
    )
    parser.add_argument(
        "--endpoint",
        default=DEFAULT_ENDPOINT,
        help="Endpoint host or URL of the S3/MinIO service; file:// URLs read a local mirror.",
    )
    parser.add_argument(
        "--sha",
        default=None,
        help="sha256 to validate against. Defaults to the .sha256 object stored beside the archive.",
    )
    parser.add_argument(
        "--os",
        default=None,
        help="Target OS in release naming. Defaults to $GOOS, then the host OS.",
    )
    parser.add_argument(
        "--arch",
        default=None,
        help="Target architecture in release naming. Defaults to $GOARCH, then the host architecture.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Directory to save the verified archive in. Defaults to the current directory.",
    )
    return parser


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for service-loader."""
    return _build_parser().parse_args(argv)


if __name__ == "__main__":
    raise SystemExit(main())
