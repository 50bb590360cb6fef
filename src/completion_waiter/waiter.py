"""Polling until a remote job reaches a terminal status.

The waiter sleeps, fetches the job status and repeats while the status is
non-terminal (CREATED, QUEUED, RUNNING, TRANSFER_ERROR). It stops on
FINISHED, ERROR or CANCELED:

- FINISHED and CANCELED are returned to the caller
- ERROR raises EncodingFailedError

Sleeping happens on a threading.Event so another thread can cancel a wait
that would otherwise block forever.
"""

import threading
import time
from enum import Enum
from typing import Any, Callable

from aws_lambda_powertools import Logger
from bitmovin_api_sdk import MessageType
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..shared.bitmovin_client import remote_call
from ..shared.config import Settings
from ..shared.exceptions import EncodingFailedError, WaitCancelledError, WaitTimeoutError
from ..shared.models import JobStatus

logger = Logger(service="completion-waiter")


class BackoffPolicy(BaseModel):
    """Delay schedule between two status checks.

    The default (5 seconds, multiplier 1.0) polls at a fixed interval.
    """

    model_config = ConfigDict(frozen=True)

    initial_interval_seconds: float = Field(default=5.0, ge=0.0)
    multiplier: float = Field(default=1.0, ge=1.0)
    max_interval_seconds: float = Field(default=60.0, ge=0.0)

    @model_validator(mode="after")
    def validate_cap(self) -> "BackoffPolicy":
        """The cap may not undercut the first delay."""
        if self.max_interval_seconds < self.initial_interval_seconds:
            raise ValueError("max_interval_seconds must be >= initial_interval_seconds")
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        """Build the policy configured through the environment."""
        return cls(
            initial_interval_seconds=settings.poll_interval_seconds,
            multiplier=settings.poll_backoff_multiplier,
            max_interval_seconds=max(
                settings.poll_max_interval_seconds,
                settings.poll_interval_seconds,
            ),
        )

    def delay_for(self, attempt: int) -> float:
        """Get the delay before status check number ``attempt`` (0-based)."""
        delay = self.initial_interval_seconds * (self.multiplier**attempt)
        return min(delay, self.max_interval_seconds)


DEFAULT_POLICY = BackoffPolicy()


def wait_for_terminal_status(
    fetch_task: Callable[[], Any],
    resource_id: str,
    policy: BackoffPolicy = DEFAULT_POLICY,
    timeout_seconds: float | None = None,
    cancel_token: threading.Event | None = None,
    resource_label: str = "Encoding",
) -> JobStatus:
    """Poll a status endpoint until a terminal status is observed.

    Args:
        fetch_task: Returns the current Bitmovin Task (status, progress, messages)
        resource_id: Id of the polled resource, for logs and errors
        policy: Delay schedule between checks
        timeout_seconds: Give up after this many seconds; None waits forever
        cancel_token: Event that aborts the wait when set
        resource_label: Kind of job being polled, used in errors

    Returns:
        FINISHED or CANCELED

    Raises:
        EncodingFailedError: If the terminal status is ERROR
        WaitTimeoutError: If the timeout elapses first
        WaitCancelledError: If the cancel token is set
    """
    if cancel_token is None:
        cancel_token = threading.Event()

    started = time.monotonic()
    attempt = 0
    last_status: JobStatus | None = None

    while True:
        delay = policy.delay_for(attempt)

        if timeout_seconds is not None:
            remaining = timeout_seconds - (time.monotonic() - started)
            if remaining <= 0:
                raise WaitTimeoutError(
                    resource_id,
                    timeout_seconds,
                    last_status.value if last_status else None,
                )
            delay = min(delay, remaining)

        if cancel_token.wait(delay):
            logger.warning("Wait cancelled", extra={"resource_id": resource_id})
            raise WaitCancelledError(resource_id, last_status.value if last_status else None)

        task = fetch_task()
        last_status = _to_job_status(task.status)
        attempt += 1

        logger.info(
            "Polled job status",
            extra={
                "resource_id": resource_id,
                "status": last_status.value,
                "progress": getattr(task, "progress", None),
                "attempt": attempt,
            },
        )

        if last_status.is_terminal:
            break

    if last_status == JobStatus.ERROR:
        error_messages = _error_messages(task)
        for message in error_messages:
            logger.error("Job reported error", extra={"resource_id": resource_id, "detail": message})
        raise EncodingFailedError(resource_id, error_messages, resource_label=resource_label)

    if last_status == JobStatus.CANCELED:
        # Treated as non-failing completion
        logger.warning("Job was canceled", extra={"resource_id": resource_id})

    return last_status


def wait_for_encoding(
    api: Any,
    encoding_id: str,
    policy: BackoffPolicy = DEFAULT_POLICY,
    timeout_seconds: float | None = None,
    cancel_token: threading.Event | None = None,
) -> JobStatus:
    """Wait for an encoding to reach a terminal status."""
    return wait_for_terminal_status(
        lambda: remote_call(
            "get_encoding_status",
            api.encoding.encodings.status,
            encoding_id=encoding_id,
        ),
        resource_id=encoding_id,
        policy=policy,
        timeout_seconds=timeout_seconds,
        cancel_token=cancel_token,
    )


def wait_for_manifest(
    api: Any,
    manifest_id: str,
    policy: BackoffPolicy = DEFAULT_POLICY,
    timeout_seconds: float | None = None,
    cancel_token: threading.Event | None = None,
) -> JobStatus:
    """Wait for a started DASH manifest to reach a terminal status."""
    return wait_for_terminal_status(
        lambda: remote_call(
            "get_dash_manifest_status",
            api.encoding.manifests.dash.status,
            manifest_id=manifest_id,
        ),
        resource_id=manifest_id,
        policy=policy,
        timeout_seconds=timeout_seconds,
        cancel_token=cancel_token,
        resource_label="DASH manifest",
    )


def _to_job_status(status: Any) -> JobStatus:
    """Map an SDK Status enum (or its string value) onto JobStatus."""
    if isinstance(status, Enum):
        status = status.value
    return JobStatus(status)


def _error_messages(task: Any) -> list[str]:
    """Collect the text of ERROR messages attached to a status task."""
    return [
        msg.text
        for msg in (getattr(task, "messages", None) or [])
        if msg.type == MessageType.ERROR
    ]
