"""service_loader package."""

from importlib.metadata import PackageNotFoundError, version

try:
    # Read installed package metadata so version stays tied to pyproject.toml.
    __version__ = version("service-loader")
except PackageNotFoundError:
    __version__ = "0+unknown"
