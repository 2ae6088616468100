"""Configuration settings using Pydantic Settings.

Provides typed runtime policy with environment variable support.

Usage:
    from objspace.config import RuntimeSettings

    # Load from environment variables (OBJSPACE_*)
    settings = RuntimeSettings()

    # Or override with explicit values
    settings = RuntimeSettings(reinclude="move_to_front", trace_dispatch=True)
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeSettings(BaseSettings):  # type: ignore[misc]
    """Policy knobs for an ObjectSpace.

    Attributes:
        method_binding: "snapshot" captures the resolved entry when a method is
            extracted; "late" re-resolves the name on every call.
        reinclude: "keep" leaves a re-included module where it is;
            "move_to_front" makes it the most recently included.
        warn_on_redefine: Emit a warning when a method table entry is overwritten.
        trace_dispatch: Record every dispatch in an in-memory trace store.
        trace_capacity: Maximum dispatch records kept by the default store.

    Environment Variables:
        OBJSPACE_METHOD_BINDING
        OBJSPACE_REINCLUDE
        OBJSPACE_WARN_ON_REDEFINE
        OBJSPACE_TRACE_DISPATCH
        OBJSPACE_TRACE_CAPACITY
    """

    model_config = SettingsConfigDict(
        env_prefix="OBJSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    method_binding: Literal["snapshot", "late"] = "snapshot"
    reinclude: Literal["keep", "move_to_front"] = "keep"
    warn_on_redefine: bool = False
    trace_dispatch: bool = False
    trace_capacity: int = Field(default=1000, ge=1)
