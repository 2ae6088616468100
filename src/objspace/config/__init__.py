"""Configuration module using Pydantic Settings.

Provides typed runtime policy with environment variable support.

Usage:
    from objspace.config import RuntimeSettings

    settings = RuntimeSettings(method_binding="late")
"""

from objspace.config.settings import RuntimeSettings

__all__ = [
    "RuntimeSettings",
]
