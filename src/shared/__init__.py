"""Shared utilities for the Bitmovin encoding pipeline."""

from .config import Settings, load_settings
from .exceptions import (
    EncodingPipelineError,
    ConfigurationError,
    RemoteCallError,
    EncodingFailedError,
    WaitAbortedError,
    WaitTimeoutError,
    WaitCancelledError,
)
from .models import (
    JobStatus,
    TERMINAL_STATUSES,
    MuxingKind,
    ResourceKind,
    WatermarkFilterSpec,
    TextFilterSpec,
    SpriteSpec,
    EncodingProfile,
    PipelineVariant,
    CreatedResource,
    PipelineResult,
)

__all__ = [
    # Config
    "Settings",
    "load_settings",
    # Exceptions
    "EncodingPipelineError",
    "ConfigurationError",
    "RemoteCallError",
    "EncodingFailedError",
    "WaitAbortedError",
    "WaitTimeoutError",
    "WaitCancelledError",
    # Models
    "JobStatus",
    "TERMINAL_STATUSES",
    "MuxingKind",
    "ResourceKind",
    "WatermarkFilterSpec",
    "TextFilterSpec",
    "SpriteSpec",
    "EncodingProfile",
    "PipelineVariant",
    "CreatedResource",
    "PipelineResult",
]
