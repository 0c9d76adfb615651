"""MACSForge package entry."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:
    __version__ = version("macsforge")
except PackageNotFoundError:  # fallback for source checkouts without metadata
    __version__ = "0.1.0"
