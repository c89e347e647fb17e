"""Validating webhook for GatewayClass objects.

A GatewayClass may not be deleted while Gateways still reference it.
"""

import logging
from typing import cast

from ingress_sync.exceptions import AdmissionDenied
from ingress_sync.lister import ObjectLister
from ingress_sync.manifest import (
    BaseManifest,
    Gateway,
    GatewayClass,
    GATEWAY_CLASS_KIND,
    GATEWAY_KIND,
    NamedResource,
    resource_id,
)

from .admission import Validator

_LOGGER = logging.getLogger(__name__)


class GatewayClassValidator(Validator):
    """Refuses deletion of a GatewayClass that is still in use."""

    kind = GATEWAY_CLASS_KIND
    manifest_class = GatewayClass

    def __init__(self, lister: ObjectLister) -> None:
        self._lister = lister

    async def validate_create(self, obj: BaseManifest) -> list[str]:
        return []

    async def validate_update(
        self, old_obj: BaseManifest, new_obj: BaseManifest
    ) -> list[str]:
        return []

    async def validate_delete(self, obj: BaseManifest) -> list[str]:
        """Deny the deletion when any Gateway references the class."""
        self._check_kind(obj)
        gateway_class = cast(GatewayClass, obj)
        _LOGGER.info("Validation for GatewayClass %s upon deletion", gateway_class.name)

        gateways: list[NamedResource] = []
        for gateway in await self._lister.list_objects(GATEWAY_KIND):
            if not isinstance(gateway, Gateway):
                continue
            if gateway.gateway_class_name == gateway_class.name:
                gateways.append(resource_id(gateway))
        if gateways:
            names = " ".join(gateway.namespaced_name for gateway in gateways)
            raise AdmissionDenied(
                f"the GatewayClass is still in using by Gateways: [{names}]"
            )
        return []
