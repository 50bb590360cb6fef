"""Unit tests for the resource ledger and the program runner."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from bitmovin_api_sdk import Status
from bitmovin_api_sdk.common.bitmovin_error import BitmovinError

from src.completion_waiter import waiter
from src.pipeline_builder import PROGRESSIVE_MP4, SEGMENTED_DEFAULT_MANIFEST, ResourceLedger, builder
from src.pipeline_builder import ledger as ledger_module
from src.programs import progressive_mp4, runner
from src.programs.runner import EXIT_FAILURE, EXIT_SUCCESS, run
from src.shared import bitmovin_client
from src.shared.models import ResourceKind


class TestResourceLedger:
    """Tests for created-resource tracking and cleanup."""

    def test_records_in_creation_order(self):
        """Test resources keep their creation order."""
        ledger = ResourceLedger()
        ledger.record(ResourceKind.HTTP_INPUT, "input-1")
        ledger.record(ResourceKind.ENCODING, "encoding-1")
        ledger.record(ResourceKind.STREAM, "stream-1", parent_id="encoding-1")

        assert len(ledger) == 3
        assert [r.resource_id for r in ledger.resources] == ["input-1", "encoding-1", "stream-1"]

    def test_cleanup_skips_encoding_children(self):
        """Test streams and muxings are left to the encoding delete."""
        api = MagicMock()
        ledger = ResourceLedger()
        ledger.record(ResourceKind.ENCODING, "encoding-1")
        ledger.record(ResourceKind.STREAM, "stream-1", parent_id="encoding-1")
        ledger.record(ResourceKind.FMP4_MUXING, "muxing-1", parent_id="encoding-1")

        failed = ledger.cleanup(api)

        assert failed == []
        api.encoding.encodings.delete.assert_called_once_with(encoding_id="encoding-1")
        api.encoding.encodings.streams.delete.assert_not_called()

    def test_cleanup_continues_after_failed_delete(self):
        """Test one failing delete does not stop the others."""
        api = MagicMock()
        api.encoding.encodings.delete.side_effect = BitmovinError("encoding is running")
        ledger = ResourceLedger()
        ledger.record(ResourceKind.HTTP_INPUT, "input-1")
        ledger.record(ResourceKind.ENCODING, "encoding-1")
        ledger.record(ResourceKind.WATERMARK_FILTER, "watermark-1")

        failed = ledger.cleanup(api)

        assert [r.resource_id for r in failed] == ["encoding-1"]
        api.encoding.filters.watermark.delete.assert_called_once_with(filter_id="watermark-1")
        api.encoding.inputs.http.delete.assert_called_once_with(input_id="input-1")

    def test_cleanup_survives_non_sdk_errors(self):
        """Test transport errors during delete are collected like API errors."""
        api = MagicMock()
        api.encoding.outputs.s3.delete.side_effect = ConnectionError("connection reset")
        ledger = ResourceLedger()
        ledger.record(ResourceKind.HTTP_INPUT, "input-1")
        ledger.record(ResourceKind.S3_OUTPUT, "output-1")

        failed = ledger.cleanup(api)

        assert [r.resource_id for r in failed] == ["output-1"]
        api.encoding.inputs.http.delete.assert_called_once_with(input_id="input-1")


class TestRunner:
    """Tests for entry point exit codes."""

    @patch("src.programs.runner.create_bitmovin_api")
    def test_success_exit_code(self, mock_create: MagicMock, bitmovin_api):
        """Test a finished encoding exits with 0."""
        mock_create.return_value = bitmovin_api

        assert run(SEGMENTED_DEFAULT_MANIFEST) == EXIT_SUCCESS
        bitmovin_api.encoding.manifests.dash.start.assert_called_once()

    @patch("src.programs.runner.create_bitmovin_api")
    def test_error_status_exit_code(self, mock_create: MagicMock, bitmovin_api, make_task):
        """Test an ERROR encoding exits with 1."""
        bitmovin_api.encoding.encodings.status.return_value = make_task(Status.ERROR)
        mock_create.return_value = bitmovin_api

        assert run(PROGRESSIVE_MP4) == EXIT_FAILURE

    @patch("src.programs.runner.create_bitmovin_api")
    def test_canceled_exit_code(self, mock_create: MagicMock, bitmovin_api, make_task):
        """Test a CANCELED encoding is not a failure."""
        bitmovin_api.encoding.encodings.status.return_value = make_task(Status.CANCELED)
        mock_create.return_value = bitmovin_api

        assert run(PROGRESSIVE_MP4) == EXIT_SUCCESS

    @patch("src.programs.runner.create_bitmovin_api")
    def test_remote_failure_exit_code(self, mock_create: MagicMock, bitmovin_api):
        """Test a failing API call exits with 1."""
        bitmovin_api.encoding.inputs.http.create.side_effect = BitmovinError("unauthorized")
        mock_create.return_value = bitmovin_api

        assert run(PROGRESSIVE_MP4) == EXIT_FAILURE

    @pytest.mark.parametrize(
        "env_var",
        ["BITMOVIN_API_KEY", "BITMOVIN_S3_BUCKET_NAME", "BITMOVIN_S3_ACCESS_KEY", "BITMOVIN_S3_SECRET_KEY"],
    )
    @patch("src.programs.runner.create_bitmovin_api")
    def test_missing_config_makes_no_remote_call(self, mock_create: MagicMock, monkeypatch, env_var):
        """Test missing configuration fails before the client is even built."""
        monkeypatch.delenv(env_var)

        assert run(PROGRESSIVE_MP4) == EXIT_FAILURE
        mock_create.assert_not_called()

    @patch("src.programs.runner.create_bitmovin_api")
    def test_program_main_exits(self, mock_create: MagicMock, bitmovin_api):
        """Test program entry points exit the process with the run status."""
        mock_create.return_value = bitmovin_api

        with pytest.raises(SystemExit) as exc_info:
            progressive_mp4.main()

        assert exc_info.value.code == EXIT_SUCCESS

    @patch("src.programs.runner.create_bitmovin_api")
    def test_unexpected_error_exit_code(self, mock_create: MagicMock, bitmovin_api):
        """Test failures outside the pipeline error hierarchy still exit with 1."""
        bitmovin_api.encoding.inputs.http.create.side_effect = ConnectionError("connection reset")
        mock_create.return_value = bitmovin_api

        with patch.object(runner.logger, "exception") as mock_log:
            assert run(PROGRESSIVE_MP4) == EXIT_FAILURE

        mock_log.assert_called_once()
        assert mock_log.call_args.kwargs["extra"] == {"variant": "progressive_mp4"}

    @patch("src.programs.runner.create_bitmovin_api")
    def test_log_level_applies_to_every_service(self, mock_create: MagicMock, bitmovin_api, monkeypatch):
        """Test LOG_LEVEL reaches the builder, waiter, ledger and client loggers."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        mock_create.return_value = bitmovin_api

        try:
            assert run(PROGRESSIVE_MP4) == EXIT_SUCCESS
            for service_logger in (
                runner.logger,
                bitmovin_client.logger,
                builder.logger,
                ledger_module.logger,
                waiter.logger,
            ):
                assert service_logger.log_level == logging.WARNING
        finally:
            runner.set_log_level("DEBUG")
