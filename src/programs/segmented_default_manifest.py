"""Segmented encoding with a default DASH manifest.

Video and audio are muxed into 4 second fMP4 segments below ``video/`` and
``audio/``. The default DASH manifest is created after the encoding starts
and started once the encoding finished.

Required environment:
    BITMOVIN_API_KEY, BITMOVIN_S3_BUCKET_NAME,
    BITMOVIN_S3_ACCESS_KEY, BITMOVIN_S3_SECRET_KEY
"""

from ..pipeline_builder import SEGMENTED_DEFAULT_MANIFEST
from .runner import main as run_variant


def main() -> None:
    run_variant(SEGMENTED_DEFAULT_MANIFEST)


if __name__ == "__main__":
    main()
