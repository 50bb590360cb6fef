"""Pydantic models for data validation and serialization.

This module defines the core data structures used throughout the pipeline:
- Job status values and the terminal set
- Filter and sprite specifications
- Encoding profile and pipeline variant descriptors
- Pipeline result models

All models use Pydantic v2 for validation and serialization.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobStatus(str, Enum):
    """Bitmovin task status values."""

    CREATED = "CREATED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    ERROR = "ERROR"
    CANCELED = "CANCELED"
    TRANSFER_ERROR = "TRANSFER_ERROR"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions can happen."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.FINISHED, JobStatus.ERROR, JobStatus.CANCELED})


class MuxingKind(str, Enum):
    """How encoded streams are packaged."""

    PROGRESSIVE_MP4 = "progressive_mp4"
    SEGMENTED_FMP4 = "segmented_fmp4"


class ResourceKind(str, Enum):
    """Remote resource types created by the pipeline."""

    HTTP_INPUT = "http_input"
    S3_OUTPUT = "s3_output"
    ENCODING = "encoding"
    H264_CONFIGURATION = "h264_configuration"
    AAC_CONFIGURATION = "aac_configuration"
    STREAM = "stream"
    MP4_MUXING = "mp4_muxing"
    FMP4_MUXING = "fmp4_muxing"
    WATERMARK_FILTER = "watermark_filter"
    TEXT_FILTER = "text_filter"
    SPRITE = "sprite"
    DASH_MANIFEST = "dash_manifest"


class WatermarkFilterSpec(BaseModel):
    """Image overlay placed relative to the top-left corner."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["watermark"] = "watermark"
    image: str = Field(
        min_length=1,
        description="URL of the overlay image",
    )
    top: int | None = Field(
        default=None,
        ge=0,
        description="Distance from the top edge in pixels",
    )
    left: int | None = Field(
        default=None,
        ge=0,
        description="Distance from the left edge in pixels",
    )


class TextFilterSpec(BaseModel):
    """Text overlay. Positions accept ffmpeg drawtext expressions."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str = Field(min_length=1)
    x: str = Field(
        default="0",
        description="Horizontal position (e.g., 'main_w / 16')",
    )
    y: str = Field(
        default="0",
        description="Vertical position (e.g., 'main_h / 9')",
    )
    font_size: Annotated[int, Field(gt=0)] = 16
    font_color: str = "white"
    shadow_color: str | None = None
    shadow_x: int | None = None
    shadow_y: int | None = None


FilterSpec = Annotated[
    Union[WatermarkFilterSpec, TextFilterSpec],
    Field(discriminator="kind"),
]


class SpriteSpec(BaseModel):
    """Thumbnail sprite sheet generated from the video stream."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        min_length=1,
        description="File name of the sprite image (e.g., 'sprites.png')",
    )
    sprite_name: str = Field(min_length=1)
    width: Annotated[int, Field(gt=0)] = 320
    height: Annotated[int, Field(gt=0)] = 240
    distance: Annotated[float, Field(gt=0)] = Field(
        default=10.0,
        description="Seconds between two thumbnails",
    )
    vtt_name: str = Field(
        min_length=1,
        description="WebVTT file mapping playback time to sprite tiles",
    )
    output_subpath: str = "sprites"


class EncodingProfile(BaseModel):
    """Source location and codec parameters shared by all variants."""

    model_config = ConfigDict(frozen=True)

    input_host: str = Field(
        min_length=1,
        description="HTTP host serving the source file",
    )
    input_path: str = Field(
        min_length=1,
        description="Path of the source file on the input host",
    )
    video_height: Annotated[int, Field(ge=144, le=4320)] = 720
    video_bitrate: Annotated[int, Field(gt=0)] = Field(
        default=4_000_000,
        description="H.264 target bitrate in bits per second",
    )
    audio_bitrate: Annotated[int, Field(gt=0)] = Field(
        default=128_000,
        description="AAC target bitrate in bits per second",
    )
    encoder_version: str = "LATEST"

    @property
    def video_configuration_name(self) -> str:
        """Name of the H.264 configuration (e.g., 'H.264 720p')."""
        return f"H.264 {self.video_height}p"

    @property
    def audio_configuration_name(self) -> str:
        """Name of the AAC configuration (e.g., 'AAC 128000 kbit/s')."""
        return f"AAC {self.audio_bitrate} kbit/s"


class PipelineVariant(BaseModel):
    """Describes one pipeline topology.

    The variant decides the muxing type, whether a DASH manifest is produced,
    which filters are attached to the video stream (in order) and whether a
    sprite stage is available.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        min_length=1,
        pattern=r"^[a-z0-9_]+$",
        description="Short identifier used in logs",
    )
    encoding_name: str = Field(
        min_length=1,
        max_length=256,
        description="Name given to the remote encoding",
    )
    output_path: str = Field(
        min_length=1,
        description="Base path inside the output bucket",
    )
    muxing_kind: MuxingKind
    file_name: str = Field(
        min_length=1,
        description="MP4 file name, or manifest name for segmented variants",
    )
    segment_length: Annotated[float, Field(gt=0)] = 4.0
    dash_manifest: bool = False
    filters: tuple[FilterSpec, ...] = ()
    sprites: SpriteSpec | None = None

    @model_validator(mode="after")
    def validate_manifest_needs_segments(self) -> "PipelineVariant":
        """A DASH manifest only makes sense over segmented muxings."""
        if self.dash_manifest and self.muxing_kind != MuxingKind.SEGMENTED_FMP4:
            raise ValueError("A DASH manifest requires segmented fMP4 muxings")
        return self

    def output_subpath(self, name: str) -> str:
        """Join a sub directory onto the variant output path."""
        return f"{self.output_path.rstrip('/')}/{name}"


class CreatedResource(BaseModel):
    """A remote resource created during a pipeline run."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    resource_id: str
    parent_id: str | None = Field(
        default=None,
        description="Owning encoding id for encoding sub-resources",
    )


class PipelineResult(BaseModel):
    """Outcome of a completed pipeline run."""

    model_config = ConfigDict(frozen=True)

    variant: str
    encoding_id: str
    status: JobStatus
    manifest_id: str | None = None
    manifest_started: bool = False
    manifest_status: JobStatus | None = None
    created_resources: tuple[CreatedResource, ...] = ()

    @property
    def is_success(self) -> bool:
        """Check if the encoding finished (canceled counts as non-failing, not success)."""
        return self.status == JobStatus.FINISHED
