"""Cached, ranked retrieval of Swift articles from feed sources."""

from swiftpatterns.version import __version__

__all__ = ["__version__"]
