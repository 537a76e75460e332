"""Version information for the Snyk issues client.

Single source of truth for version number.
Follows PEP 440 and semantic versioning principles.
"""

__version__ = "1.0.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))
