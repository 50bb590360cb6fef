"""Bitmovin API client construction and call wrapping.

This module provides:
- Client construction from validated settings
- A wrapper turning SDK failures into RemoteCallError

No call is retried. Create calls are not idempotent, so a retried create
could leave duplicate resources behind.
"""

from typing import Any, Callable

from aws_lambda_powertools import Logger
from bitmovin_api_sdk import BitmovinApi, BitmovinApiLogger
from bitmovin_api_sdk.common.bitmovin_error import BitmovinError

from .config import Settings
from .exceptions import RemoteCallError

logger = Logger(service="bitmovin-client")


def create_bitmovin_api(settings: Settings) -> BitmovinApi:
    """Build a Bitmovin API client.

    Args:
        settings: Validated settings holding the API key

    Returns:
        BitmovinApi client, logging every request when api_debug is set
    """
    kwargs: dict[str, Any] = {"api_key": settings.api_key}
    if settings.tenant_org_id:
        kwargs["tenant_org_id"] = settings.tenant_org_id
    if settings.api_debug:
        kwargs["logger"] = BitmovinApiLogger()

    return BitmovinApi(**kwargs)


def remote_call(operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
    """Invoke one Bitmovin API operation.

    Args:
        operation: Name used in logs and errors (e.g., 'create_encoding')
        func: Bound SDK method
        **kwargs: Keyword arguments forwarded to the SDK method

    Returns:
        Whatever the SDK method returns

    Raises:
        RemoteCallError: If the SDK reports a failure
    """
    logger.debug("Calling Bitmovin API", extra={"operation": operation})
    try:
        return func(**kwargs)
    except BitmovinError as e:
        logger.error(
            "Bitmovin API call failed",
            extra={"operation": operation, "error": str(e)},
        )
        raise RemoteCallError(operation, e) from e
