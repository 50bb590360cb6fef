"""Bitmovin encoding pipeline builder.

Creates the remote resources of one encoding in dependency order and threads
each returned id into the next request:

    HTTP input, S3 output
      -> encoding
        -> H.264 + AAC codec configurations
          -> video + audio streams
            -> muxings (one progressive MP4, or one fMP4 per stream)
            -> filters attached to the video stream (ordered)
            -> sprites (optional)
      -> start encoding
      -> default DASH manifest (segmented variants)
      -> wait for terminal status
      -> start manifest

Each create call issues exactly one request. Nothing is retried, and running
the pipeline twice creates everything twice.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

from aws_lambda_powertools import Logger
from bitmovin_api_sdk import (
    AacAudioConfiguration,
    CloudRegion,
    DashManifestDefault,
    DashManifestDefaultVersion,
    Encoding,
    EncodingOutput,
    Fmp4Muxing,
    H264VideoConfiguration,
    HttpInput,
    Mp4Muxing,
    MuxingStream,
    PresetConfiguration,
    S3Output,
    Sprite,
    StartEncodingRequest,
    Stream,
    StreamFilter,
    StreamInput,
    StreamMode,
    StreamSelectionMode,
    TextFilter,
    WatermarkFilter,
)

from ..completion_waiter import BackoffPolicy, wait_for_encoding, wait_for_manifest
from ..shared.bitmovin_client import remote_call
from ..shared.config import Settings
from ..shared.models import (
    EncodingProfile,
    JobStatus,
    MuxingKind,
    PipelineResult,
    PipelineVariant,
    ResourceKind,
    SpriteSpec,
    TextFilterSpec,
    WatermarkFilterSpec,
)
from .ledger import ResourceLedger
from .variants import DEFAULT_PROFILE

logger = Logger(service="pipeline-builder")


@dataclass
class AssembledPipeline:
    """Ids of the resources created before the encoding is started."""

    input_id: str
    output_id: str
    encoding_id: str
    video_configuration_id: str
    audio_configuration_id: str
    video_stream_id: str
    audio_stream_id: str
    muxing_ids: list[str] = field(default_factory=list)
    filter_ids: list[str] = field(default_factory=list)
    sprite_id: str | None = None


class EncodingPipeline:
    """One parameterized pipeline for every exercise variant.

    Example:
        >>> pipeline = EncodingPipeline(api, settings, SEGMENTED_DEFAULT_MANIFEST)
        >>> result = pipeline.run()
        >>> result.status
        <JobStatus.FINISHED: 'FINISHED'>
    """

    def __init__(
        self,
        api: Any,
        settings: Settings,
        variant: PipelineVariant,
        profile: EncodingProfile = DEFAULT_PROFILE,
    ) -> None:
        self.api = api
        self.settings = settings
        self.variant = variant
        self.profile = profile
        self.ledger = ResourceLedger()
        self.policy = BackoffPolicy.from_settings(settings)

    def run(self, cancel_token: threading.Event | None = None) -> PipelineResult:
        """Assemble, start and wait for the encoding.

        Args:
            cancel_token: Event that aborts the status wait when set

        Returns:
            PipelineResult with the terminal status

        Raises:
            RemoteCallError: If any API call fails
            EncodingFailedError: If the encoding ends in ERROR
            WaitAbortedError: If the wait times out or is cancelled
        """
        logger.info(
            "Starting pipeline",
            extra={
                "variant": self.variant.key,
                "muxing_kind": self.variant.muxing_kind.value,
                "dash_manifest": self.variant.dash_manifest,
                "filter_count": len(self.variant.filters),
            },
        )

        try:
            assembled = self.assemble()
            self._start_encoding(assembled.encoding_id)
        except Exception:
            self._handle_assembly_failure()
            raise

        manifest_id = None
        if self.variant.dash_manifest:
            manifest_id = self._create_dash_manifest(assembled.encoding_id, assembled.output_id)

        status = wait_for_encoding(
            self.api,
            assembled.encoding_id,
            policy=self.policy,
            timeout_seconds=self.settings.wait_timeout_seconds,
            cancel_token=cancel_token,
        )

        manifest_started = False
        manifest_status = None
        if manifest_id is not None:
            if status == JobStatus.FINISHED:
                self._start_dash_manifest(manifest_id)
                manifest_started = True
                if self.settings.wait_for_manifest:
                    manifest_status = wait_for_manifest(
                        self.api,
                        manifest_id,
                        policy=self.policy,
                        timeout_seconds=self.settings.wait_timeout_seconds,
                        cancel_token=cancel_token,
                    )
            else:
                logger.warning(
                    "Encoding did not finish; manifest not started",
                    extra={"manifest_id": manifest_id, "status": status.value},
                )

        logger.info(
            "Pipeline complete",
            extra={
                "variant": self.variant.key,
                "encoding_id": assembled.encoding_id,
                "status": status.value,
                "manifest_id": manifest_id,
            },
        )

        return PipelineResult(
            variant=self.variant.key,
            encoding_id=assembled.encoding_id,
            status=status,
            manifest_id=manifest_id,
            manifest_started=manifest_started,
            manifest_status=manifest_status,
            created_resources=self.ledger.resources,
        )

    def assemble(self) -> AssembledPipeline:
        """Create every resource the encoding needs, in dependency order.

        Returns:
            AssembledPipeline with the created ids
        """
        input_id = self._create_http_input()
        output_id = self._create_s3_output()
        encoding_id = self._create_encoding()

        video_configuration_id = self._create_h264_video_configuration()
        audio_configuration_id = self._create_aac_audio_configuration()

        video_stream_id = self._create_stream(encoding_id, input_id, video_configuration_id)
        audio_stream_id = self._create_stream(encoding_id, input_id, audio_configuration_id)

        assembled = AssembledPipeline(
            input_id=input_id,
            output_id=output_id,
            encoding_id=encoding_id,
            video_configuration_id=video_configuration_id,
            audio_configuration_id=audio_configuration_id,
            video_stream_id=video_stream_id,
            audio_stream_id=audio_stream_id,
        )

        if self.variant.muxing_kind == MuxingKind.PROGRESSIVE_MP4:
            assembled.muxing_ids.append(
                self._create_mp4_muxing(
                    encoding_id,
                    output_id,
                    [video_stream_id, audio_stream_id],
                )
            )
        else:
            assembled.muxing_ids.append(
                self._create_fmp4_muxing(encoding_id, output_id, video_stream_id, "video")
            )
            assembled.muxing_ids.append(
                self._create_fmp4_muxing(encoding_id, output_id, audio_stream_id, "audio")
            )

        if self.variant.filters:
            assembled.filter_ids = self._create_filters()
            self._attach_stream_filters(encoding_id, video_stream_id, assembled.filter_ids)

        if self.variant.sprites is not None:
            if self.settings.enable_sprites:
                assembled.sprite_id = self._create_sprite(
                    encoding_id, video_stream_id, output_id, self.variant.sprites
                )
            else:
                logger.debug("Sprite stage disabled", extra={"variant": self.variant.key})

        return assembled

    def _handle_assembly_failure(self) -> None:
        """Report, and optionally delete, resources of an aborted assembly."""
        self.ledger.log_orphans()
        if self.settings.cleanup_on_failure and len(self.ledger):
            failed = self.ledger.cleanup(self.api)
            if failed:
                logger.warning(
                    "Cleanup incomplete",
                    extra={"remaining": [r.model_dump(mode="json") for r in failed]},
                )

    def _build_encoding_output(self, output_id: str, output_path: str) -> EncodingOutput:
        """Builds the EncodingOutput telling Bitmovin where to write content."""
        return EncodingOutput(
            output_id=output_id,
            output_path=output_path,
        )

    def _create_http_input(self) -> str:
        http_input = HttpInput(host=self.profile.input_host)
        created = remote_call(
            "create_http_input",
            self.api.encoding.inputs.http.create,
            http_input=http_input,
        )
        self.ledger.record(ResourceKind.HTTP_INPUT, created.id)
        logger.info("Created input", extra={"input_id": created.id, "host": self.profile.input_host})
        return created.id

    def _create_s3_output(self) -> str:
        s3_output = S3Output(
            bucket_name=self.settings.s3_bucket_name,
            access_key=self.settings.s3_access_key,
            secret_key=self.settings.s3_secret_key,
        )
        created = remote_call(
            "create_s3_output",
            self.api.encoding.outputs.s3.create,
            s3_output=s3_output,
        )
        self.ledger.record(ResourceKind.S3_OUTPUT, created.id)
        logger.info(
            "Created output",
            extra={"output_id": created.id, "bucket": self.settings.s3_bucket_name},
        )
        return created.id

    def _create_encoding(self) -> str:
        encoding = Encoding(
            name=self.variant.encoding_name,
            cloud_region=CloudRegion.AUTO,
            encoder_version=self.profile.encoder_version,
        )
        created = remote_call(
            "create_encoding",
            self.api.encoding.encodings.create,
            encoding=encoding,
        )
        self.ledger.record(ResourceKind.ENCODING, created.id)
        logger.info("Created encoding", extra={"encoding_id": created.id})
        return created.id

    def _create_h264_video_configuration(self) -> str:
        configuration = H264VideoConfiguration(
            name=self.profile.video_configuration_name,
            preset_configuration=PresetConfiguration.VOD_STANDARD,
            height=self.profile.video_height,
            bitrate=self.profile.video_bitrate,
        )
        created = remote_call(
            "create_h264_configuration",
            self.api.encoding.configurations.video.h264.create,
            h264_video_configuration=configuration,
        )
        self.ledger.record(ResourceKind.H264_CONFIGURATION, created.id)
        return created.id

    def _create_aac_audio_configuration(self) -> str:
        configuration = AacAudioConfiguration(
            name=self.profile.audio_configuration_name,
            bitrate=self.profile.audio_bitrate,
        )
        created = remote_call(
            "create_aac_configuration",
            self.api.encoding.configurations.audio.aac.create,
            aac_audio_configuration=configuration,
        )
        self.ledger.record(ResourceKind.AAC_CONFIGURATION, created.id)
        return created.id

    def _create_stream(self, encoding_id: str, input_id: str, configuration_id: str) -> str:
        """Bind the source file to one codec configuration."""
        stream_input = StreamInput(
            input_id=input_id,
            input_path=self.profile.input_path,
            selection_mode=StreamSelectionMode.AUTO,
        )
        stream = Stream(
            input_streams=[stream_input],
            codec_config_id=configuration_id,
            mode=StreamMode.STANDARD,
        )
        created = remote_call(
            "create_stream",
            self.api.encoding.encodings.streams.create,
            encoding_id=encoding_id,
            stream=stream,
        )
        self.ledger.record(ResourceKind.STREAM, created.id, parent_id=encoding_id)
        logger.info(
            "Created stream",
            extra={"stream_id": created.id, "codec_config_id": configuration_id},
        )
        return created.id

    def _create_mp4_muxing(
        self,
        encoding_id: str,
        output_id: str,
        stream_ids: list[str],
    ) -> str:
        """Single progressive MP4 file holding all given streams."""
        muxing = Mp4Muxing(
            outputs=[self._build_encoding_output(output_id, self.variant.output_path)],
            filename=self.variant.file_name,
            streams=[MuxingStream(stream_id=stream_id) for stream_id in stream_ids],
        )
        created = remote_call(
            "create_mp4_muxing",
            self.api.encoding.encodings.muxings.mp4.create,
            encoding_id=encoding_id,
            mp4_muxing=muxing,
        )
        self.ledger.record(ResourceKind.MP4_MUXING, created.id, parent_id=encoding_id)
        logger.info(
            "Created MP4 muxing",
            extra={"muxing_id": created.id, "file_name": self.variant.file_name},
        )
        return created.id

    def _create_fmp4_muxing(
        self,
        encoding_id: str,
        output_id: str,
        stream_id: str,
        subpath: str,
    ) -> str:
        """Fragmented MP4 segments for one stream, written below ``subpath``."""
        output_path = self.variant.output_subpath(subpath)
        muxing = Fmp4Muxing(
            outputs=[self._build_encoding_output(output_id, output_path)],
            segment_length=self.variant.segment_length,
            streams=[MuxingStream(stream_id=stream_id)],
        )
        created = remote_call(
            "create_fmp4_muxing",
            self.api.encoding.encodings.muxings.fmp4.create,
            encoding_id=encoding_id,
            fmp4_muxing=muxing,
        )
        self.ledger.record(ResourceKind.FMP4_MUXING, created.id, parent_id=encoding_id)
        logger.info(
            "Created fMP4 muxing",
            extra={"muxing_id": created.id, "output_path": output_path},
        )
        return created.id

    def _create_filters(self) -> list[str]:
        """Create the variant filters, keeping their order."""
        filter_ids = []
        for spec in self.variant.filters:
            if isinstance(spec, WatermarkFilterSpec):
                filter_ids.append(self._create_watermark_filter(spec))
            elif isinstance(spec, TextFilterSpec):
                filter_ids.append(self._create_text_filter(spec))
            else:
                raise TypeError(f"Unsupported filter spec: {type(spec).__name__}")
        return filter_ids

    def _create_watermark_filter(self, spec: WatermarkFilterSpec) -> str:
        watermark_filter = WatermarkFilter(image=spec.image, top=spec.top, left=spec.left)
        created = remote_call(
            "create_watermark_filter",
            self.api.encoding.filters.watermark.create,
            watermark_filter=watermark_filter,
        )
        self.ledger.record(ResourceKind.WATERMARK_FILTER, created.id)
        return created.id

    def _create_text_filter(self, spec: TextFilterSpec) -> str:
        text_filter = TextFilter(
            text=spec.text,
            x=spec.x,
            y=spec.y,
            font_size=spec.font_size,
            font_color=spec.font_color,
            shadow_color=spec.shadow_color,
            shadow_x=spec.shadow_x,
            shadow_y=spec.shadow_y,
        )
        created = remote_call(
            "create_text_filter",
            self.api.encoding.filters.text.create,
            text_filter=text_filter,
        )
        self.ledger.record(ResourceKind.TEXT_FILTER, created.id)
        return created.id

    def _attach_stream_filters(
        self,
        encoding_id: str,
        stream_id: str,
        filter_ids: list[str],
    ) -> None:
        """Attach filters to a stream; position follows list order from 0."""
        stream_filters = [
            StreamFilter(id_=filter_id, position=position)
            for position, filter_id in enumerate(filter_ids)
        ]
        remote_call(
            "attach_stream_filters",
            self.api.encoding.encodings.streams.filters.create,
            encoding_id=encoding_id,
            stream_id=stream_id,
            stream_filter=stream_filters,
        )
        logger.info(
            "Attached stream filters",
            extra={
                "stream_id": stream_id,
                "filters": [{"id": f.id, "position": f.position} for f in stream_filters],
            },
        )

    def _create_sprite(
        self,
        encoding_id: str,
        stream_id: str,
        output_id: str,
        spec: SpriteSpec,
    ) -> str:
        output_path = self.variant.output_subpath(spec.output_subpath)
        sprite = Sprite(
            outputs=[self._build_encoding_output(output_id, output_path)],
            name=spec.name,
            sprite_name=spec.sprite_name,
            width=spec.width,
            height=spec.height,
            distance=spec.distance,
            vtt_name=spec.vtt_name,
        )
        created = remote_call(
            "create_sprite",
            self.api.encoding.encodings.streams.sprites.create,
            encoding_id=encoding_id,
            stream_id=stream_id,
            sprite=sprite,
        )
        self.ledger.record(ResourceKind.SPRITE, created.id, parent_id=encoding_id)
        logger.info("Created sprite", extra={"sprite_id": created.id, "output_path": output_path})
        return created.id

    def _start_encoding(self, encoding_id: str) -> None:
        remote_call(
            "start_encoding",
            self.api.encoding.encodings.start,
            encoding_id=encoding_id,
            start_encoding_request=StartEncodingRequest(),
        )
        logger.info("Started encoding", extra={"encoding_id": encoding_id})

    def _create_dash_manifest(self, encoding_id: str, output_id: str) -> str:
        """Default DASH manifest covering every muxing of the encoding."""
        manifest = DashManifestDefault(
            encoding_id=encoding_id,
            manifest_name=self.variant.file_name,
            version=DashManifestDefaultVersion.V1,
            outputs=[self._build_encoding_output(output_id, self.variant.output_path)],
        )
        created = remote_call(
            "create_dash_manifest",
            self.api.encoding.manifests.dash.default.create,
            dash_manifest_default=manifest,
        )
        self.ledger.record(ResourceKind.DASH_MANIFEST, created.id)
        logger.info("Created DASH manifest", extra={"manifest_id": created.id})
        return created.id

    def _start_dash_manifest(self, manifest_id: str) -> None:
        remote_call(
            "start_dash_manifest",
            self.api.encoding.manifests.dash.start,
            manifest_id=manifest_id,
        )
        logger.info("Started DASH manifest", extra={"manifest_id": manifest_id})
