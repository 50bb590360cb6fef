"""Completion waiter for Bitmovin encodings and manifests."""

from .waiter import (
    BackoffPolicy,
    DEFAULT_POLICY,
    wait_for_encoding,
    wait_for_manifest,
    wait_for_terminal_status,
)

__all__ = [
    "BackoffPolicy",
    "DEFAULT_POLICY",
    "wait_for_encoding",
    "wait_for_manifest",
    "wait_for_terminal_status",
]
