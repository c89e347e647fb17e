"""Validating webhook for GatewayProxy objects.

Two GatewayProxy objects that reach the same control plane with the same
credentials would write to the same configuration on the data plane and
silently overwrite each other. A GatewayProxy is refused when another one
already shares both:

- its connection target: the same Service, or any common endpoint, and
- its credential: the same AdminKey secret key, or the same inline AdminKey.

A shared target with different credentials (or the reverse) is allowed.
"""

import logging
from typing import cast

from ingress_sync.exceptions import AdmissionDenied
from ingress_sync.lister import ObjectLister
from ingress_sync.manifest import (
    BaseManifest,
    ControlPlaneProvider,
    GatewayProxy,
    GATEWAY_PROXY_KIND,
    resource_id,
)

from .admission import Validator

_LOGGER = logging.getLogger(__name__)


def _target_overlap(
    candidate: ControlPlaneProvider, existing: ControlPlaneProvider
) -> str | None:
    """Return a description of the shared connection target, if any."""
    if (
        candidate.service is not None
        and existing.service is not None
        and candidate.service.namespace == existing.service.namespace
        and candidate.service.name == existing.service.name
    ):
        return f"Service {candidate.service}"
    shared = [
        endpoint
        for endpoint in dict.fromkeys(candidate.endpoints)
        if endpoint in existing.endpoints
    ]
    if shared:
        return f"control plane endpoints [{', '.join(shared)}]"
    return None


def _credential_overlap(
    candidate: ControlPlaneProvider, existing: ControlPlaneProvider
) -> str | None:
    """Return a description of the shared credential, if any."""
    if (
        candidate.admin_key_secret is not None
        and candidate.admin_key_secret == existing.admin_key_secret
    ):
        return f"AdminKey secret {candidate.admin_key_secret}"
    if (
        candidate.admin_key_value
        and candidate.admin_key_value == existing.admin_key_value
    ):
        return "inline AdminKey value"
    return None


class GatewayProxyValidator(Validator):
    """Refuses GatewayProxy objects that collide with an existing one."""

    kind = GATEWAY_PROXY_KIND
    manifest_class = GatewayProxy

    def __init__(self, lister: ObjectLister) -> None:
        self._lister = lister

    async def _check_conflicts(self, proxy: GatewayProxy) -> None:
        if (candidate := proxy.control_plane) is None:
            return
        rid = resource_id(proxy)
        for other in await self._lister.list_objects(GATEWAY_PROXY_KIND):
            if not isinstance(other, GatewayProxy) or other.control_plane is None:
                continue
            # The previous state of the object being updated
            if resource_id(other) == rid:
                continue
            if (target := _target_overlap(candidate, other.control_plane)) is None:
                continue
            if (
                credential := _credential_overlap(candidate, other.control_plane)
            ) is None:
                continue
            raise AdmissionDenied(
                f"gateway proxy configuration conflict: GatewayProxy {rid.namespaced_name} "
                f"conflicts with {resource_id(other).namespaced_name} "
                f"on {target} and {credential}"
            )

    async def validate_create(self, obj: BaseManifest) -> list[str]:
        self._check_kind(obj)
        await self._check_conflicts(cast(GatewayProxy, obj))
        return []

    async def validate_update(
        self, old_obj: BaseManifest, new_obj: BaseManifest
    ) -> list[str]:
        self._check_kind(new_obj)
        await self._check_conflicts(cast(GatewayProxy, new_obj))
        return []

    async def validate_delete(self, obj: BaseManifest) -> list[str]:
        return []
