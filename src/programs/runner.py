"""Shared entry point logic for the exercise programs.

Flow:
1. Load and validate settings (no API call happens before this succeeds)
2. Build the Bitmovin client
3. Run the variant pipeline
4. Map the outcome onto a process exit code
"""

import sys

from aws_lambda_powertools import Logger

from ..completion_waiter import waiter
from ..pipeline_builder import EncodingPipeline, builder, ledger
from ..shared import bitmovin_client
from ..shared.bitmovin_client import create_bitmovin_api
from ..shared.config import load_settings
from ..shared.exceptions import EncodingPipelineError
from ..shared.models import PipelineVariant

logger = Logger(service="encoding-exercises")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def set_log_level(level: str) -> None:
    """Apply one log level to every service logger of the pipeline."""
    for service_logger in (
        logger,
        bitmovin_client.logger,
        builder.logger,
        ledger.logger,
        waiter.logger,
    ):
        service_logger.setLevel(level)


def run(variant: PipelineVariant) -> int:
    """Run one variant end to end.

    Args:
        variant: Pipeline topology to build

    Returns:
        EXIT_SUCCESS when the encoding finished or was canceled,
        EXIT_FAILURE on any failure
    """
    try:
        settings = load_settings()
        set_log_level(settings.log_level)

        api = create_bitmovin_api(settings)
        result = EncodingPipeline(api, settings, variant).run()
    except EncodingPipelineError as e:
        logger.error("Pipeline failed", extra={"variant": variant.key, **e.to_dict()})
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected pipeline failure", extra={"variant": variant.key})
        return EXIT_FAILURE

    logger.info(
        "Pipeline finished",
        extra={
            "variant": result.variant,
            "encoding_id": result.encoding_id,
            "status": result.status.value,
            "manifest_id": result.manifest_id,
            "resource_count": len(result.created_resources),
        },
    )
    return EXIT_SUCCESS


def main(variant: PipelineVariant) -> None:
    """Run a variant and exit the process with its status."""
    sys.exit(run(variant))
