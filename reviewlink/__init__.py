"""reviewlink - shareable video review links with timestamped feedback."""

from reviewlink.version import __version__

__all__ = ["__version__"]
