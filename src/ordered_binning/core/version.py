"""
Version metadata for the ordered binning package.

The version string is read from the installed distribution metadata so that
pyproject.toml stays the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ordered-binning")
except PackageNotFoundError:
    __version__ = "0.0.0"
