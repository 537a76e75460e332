"""Snyk issues client - read-only access to the Snyk REST API.

Flattens the organizations -> projects -> issues hierarchy into in-memory
lists for a consuming process such as a metrics exporter:
- Async REST client with cursor pagination (client.py)
- Immutable payload models (models.py)
- Configuration management with environment overrides (config.py)
- Structured logging and request metrics (logging_config.py, metrics.py)

Python Version: 3.10+ required
"""

from .__version__ import __version__
from .client import (
    API_VERSION,
    PAGE_LIMIT,
    BuildError,
    DecodeError,
    RequestFailed,
    SnykClient,
    SnykClientError,
    TransportError,
)
from .config import SnykConfig, get_config, reset_config
from .logging_config import StructuredFormatter, TextFormatter, configure_logging
from .models import Issue, Links, Organization, Page, Project
from .timing import Enumeration, timed_enumeration

# Submodule export so hosts can register or patch metrics by module path
from . import metrics

__all__ = [
    "__version__",
    # Client
    "API_VERSION",
    "PAGE_LIMIT",
    "SnykClient",
    # Errors
    "SnykClientError",
    "BuildError",
    "TransportError",
    "RequestFailed",
    "DecodeError",
    # Models
    "Organization",
    "Project",
    "Issue",
    "Links",
    "Page",
    # Configuration
    "SnykConfig",
    "get_config",
    "reset_config",
    # Logging
    "configure_logging",
    "StructuredFormatter",
    "TextFormatter",
    "Enumeration",
    "timed_enumeration",
]
