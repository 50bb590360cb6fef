"""Segmented DASH encoding with watermark and text overlays.

Same topology as the segmented exercise, plus a watermark image (position 0)
and a text overlay (position 1) on the video stream. Set ENABLE_SPRITES=true
to also generate a thumbnail sprite sheet below ``sprites/``.

Required environment:
    BITMOVIN_API_KEY, BITMOVIN_S3_BUCKET_NAME,
    BITMOVIN_S3_ACCESS_KEY, BITMOVIN_S3_SECRET_KEY
"""

from ..pipeline_builder import SPRITES_AND_WATERMARK
from .runner import main as run_variant


def main() -> None:
    run_variant(SPRITES_AND_WATERMARK)


if __name__ == "__main__":
    main()
