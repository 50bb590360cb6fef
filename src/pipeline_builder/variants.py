"""Pipeline variants of the three encoding exercises.

All variants read the same source file and use the same codec settings
(DEFAULT_PROFILE). They differ in muxing type, manifest generation and the
filters attached to the video stream.
"""

from ..shared.models import (
    EncodingProfile,
    MuxingKind,
    PipelineVariant,
    SpriteSpec,
    TextFilterSpec,
    WatermarkFilterSpec,
)

SOURCE_HOST = "mackenzie-emea.s3.eu-west-1.amazonaws.com"

DEFAULT_PROFILE = EncodingProfile(
    input_host=SOURCE_HOST,
    input_path="/input/flower_show_1080p.mov",
    video_height=720,
    video_bitrate=4_000_000,
    audio_bitrate=128_000,
)

PROGRESSIVE_MP4 = PipelineVariant(
    key="progressive_mp4",
    encoding_name="MacKenzie Exercise - Progressive MP4",
    output_path="/output/encodings/progressive",
    muxing_kind=MuxingKind.PROGRESSIVE_MP4,
    file_name="progressive_output.mp4",
)

SEGMENTED_DEFAULT_MANIFEST = PipelineVariant(
    key="segmented_default_manifest",
    encoding_name="MacKenzie Exercise - Segmented with Default Manifest",
    output_path="/output/encodings/segmented_default_manifest",
    muxing_kind=MuxingKind.SEGMENTED_FMP4,
    file_name="segmented_output.mpd",
    segment_length=4.0,
    dash_manifest=True,
)

SPRITES_AND_WATERMARK = PipelineVariant(
    key="sprites_and_watermark",
    encoding_name="MacKenzie Exercise - Sprites and Watermark",
    output_path="/output/encodings/sprites_and_watermark",
    muxing_kind=MuxingKind.SEGMENTED_FMP4,
    file_name="output.mpd",
    segment_length=4.0,
    dash_manifest=True,
    filters=(
        WatermarkFilterSpec(
            image=f"https://{SOURCE_HOST}/input/watermark.png",
            top=10,
            left=10,
        ),
        TextFilterSpec(
            text="TEST TEXT",
            x="main_w / 16",
            y="main_h / 9",
            font_size=64,
            font_color="white",
            shadow_color="black",
            shadow_x=4,
            shadow_y=4,
        ),
    ),
    # Only runs with ENABLE_SPRITES=true
    sprites=SpriteSpec(
        name="sprites.png",
        sprite_name="spritesName",
        width=320,
        height=240,
        distance=10.0,
        vtt_name="sprites.vtt",
    ),
)

VARIANTS: dict[str, PipelineVariant] = {
    variant.key: variant
    for variant in (PROGRESSIVE_MP4, SEGMENTED_DEFAULT_MANIFEST, SPRITES_AND_WATERMARK)
}
