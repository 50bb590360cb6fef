"""Pipeline builder for Bitmovin encodings.

This module handles encoding pipeline assembly:
- Variant descriptors for the three exercises
- Resource creation in dependency order
- Created-resource ledger with optional cleanup
"""

from .builder import AssembledPipeline, EncodingPipeline
from .ledger import ResourceLedger
from .variants import (
    DEFAULT_PROFILE,
    PROGRESSIVE_MP4,
    SEGMENTED_DEFAULT_MANIFEST,
    SPRITES_AND_WATERMARK,
    VARIANTS,
)

__all__ = [
    "AssembledPipeline",
    "EncodingPipeline",
    "ResourceLedger",
    "DEFAULT_PROFILE",
    "PROGRESSIVE_MP4",
    "SEGMENTED_DEFAULT_MANIFEST",
    "SPRITES_AND_WATERMARK",
    "VARIANTS",
]
