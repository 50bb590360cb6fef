"""Progressive MP4 exercise.

Encodes the source into a single MP4 file holding an H.264 720p video
stream and an AAC audio stream.

Required environment:
    BITMOVIN_API_KEY, BITMOVIN_S3_BUCKET_NAME,
    BITMOVIN_S3_ACCESS_KEY, BITMOVIN_S3_SECRET_KEY
"""

from ..pipeline_builder import PROGRESSIVE_MP4
from .runner import main as run_variant


def main() -> None:
    run_variant(PROGRESSIVE_MP4)


if __name__ == "__main__":
    main()
