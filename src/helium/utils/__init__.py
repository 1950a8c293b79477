"""
Utility modules for Helium.
"""

from .errors import (
    ConfigurationError,
    HeliumError,
    PersistenceError,
    PlatformError,
    error_boundary,
    safe_execute,
)

__all__ = [
    "HeliumError",
    "PersistenceError",
    "ConfigurationError",
    "PlatformError",
    "error_boundary",
    "safe_execute",
]
