"""Ordered record of remote resources created by a pipeline run.

Bitmovin create calls are not idempotent and nothing is rolled back by the
service. The ledger remembers what was created, in creation order, so a
failed run can at least report orphaned resources and, when enabled, delete
them best-effort in reverse order.

Sub-resources of an encoding (streams, muxings, sprites) carry a parent id
and are removed together with their encoding.
"""

from typing import Any, Callable

from aws_lambda_powertools import Logger

from ..shared.models import CreatedResource, ResourceKind

logger = Logger(service="resource-ledger")

# Delete operation per top-level resource kind
DELETE_OPERATIONS: dict[ResourceKind, Callable[[Any, str], Any]] = {
    ResourceKind.HTTP_INPUT: lambda api, rid: api.encoding.inputs.http.delete(input_id=rid),
    ResourceKind.S3_OUTPUT: lambda api, rid: api.encoding.outputs.s3.delete(output_id=rid),
    ResourceKind.ENCODING: lambda api, rid: api.encoding.encodings.delete(encoding_id=rid),
    ResourceKind.H264_CONFIGURATION: (
        lambda api, rid: api.encoding.configurations.video.h264.delete(configuration_id=rid)
    ),
    ResourceKind.AAC_CONFIGURATION: (
        lambda api, rid: api.encoding.configurations.audio.aac.delete(configuration_id=rid)
    ),
    ResourceKind.WATERMARK_FILTER: (
        lambda api, rid: api.encoding.filters.watermark.delete(filter_id=rid)
    ),
    ResourceKind.TEXT_FILTER: lambda api, rid: api.encoding.filters.text.delete(filter_id=rid),
    ResourceKind.DASH_MANIFEST: (
        lambda api, rid: api.encoding.manifests.dash.delete(manifest_id=rid)
    ),
}


class ResourceLedger:
    """Creation-ordered list of remote resources."""

    def __init__(self) -> None:
        self._resources: list[CreatedResource] = []

    def record(
        self,
        kind: ResourceKind,
        resource_id: str,
        parent_id: str | None = None,
    ) -> CreatedResource:
        """Remember a freshly created resource."""
        resource = CreatedResource(kind=kind, resource_id=resource_id, parent_id=parent_id)
        self._resources.append(resource)
        return resource

    @property
    def resources(self) -> tuple[CreatedResource, ...]:
        return tuple(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def log_orphans(self) -> None:
        """Log every recorded resource for manual cleanup."""
        if not self._resources:
            return
        logger.warning(
            "Pipeline aborted; remote resources left behind",
            extra={"resources": [r.model_dump(mode="json") for r in self._resources]},
        )

    def cleanup(self, api: Any) -> list[CreatedResource]:
        """Delete top-level resources in reverse creation order.

        Failures are logged and skipped so one stuck resource does not keep
        the others alive.

        Args:
            api: BitmovinApi client

        Returns:
            Resources that could not be deleted
        """
        failed: list[CreatedResource] = []

        for resource in reversed(self._resources):
            if resource.parent_id is not None:
                continue

            delete = DELETE_OPERATIONS.get(resource.kind)
            if delete is None:
                continue

            try:
                delete(api, resource.resource_id)
            except Exception as e:
                logger.error(
                    "Failed to delete resource",
                    extra={
                        "kind": resource.kind.value,
                        "resource_id": resource.resource_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )
                failed.append(resource)
                continue

            logger.info(
                "Deleted resource",
                extra={"kind": resource.kind.value, "resource_id": resource.resource_id},
            )

        return failed
