"""Validating webhook for Gateway objects."""

import logging
from typing import cast

from ingress_sync.lister import ObjectLister
from ingress_sync.manifest import (
    BaseManifest,
    Gateway,
    GATEWAY_KIND,
    GATEWAY_PROXY_KIND,
)

from .admission import Validator

_LOGGER = logging.getLogger(__name__)


class GatewayValidator(Validator):
    """Warns when a Gateway references a GatewayProxy that does not exist.

    The Gateway is admitted either way since the GatewayProxy may be created
    afterwards.
    """

    kind = GATEWAY_KIND
    manifest_class = Gateway

    def __init__(self, lister: ObjectLister) -> None:
        self._lister = lister

    async def _check_parameters_ref(self, gateway: Gateway) -> list[str]:
        ref = gateway.parameters_ref
        if ref is None or ref.kind != GATEWAY_PROXY_KIND:
            return []
        proxies = await self._lister.list_objects(GATEWAY_PROXY_KIND, gateway.namespace)
        if any(getattr(proxy, "name", None) == ref.name for proxy in proxies):
            return []
        _LOGGER.debug("Gateway %s references missing GatewayProxy %s", gateway.name, ref.name)
        return [f"Referenced GatewayProxy '{gateway.namespace}/{ref.name}' not found."]

    async def validate_create(self, obj: BaseManifest) -> list[str]:
        self._check_kind(obj)
        return await self._check_parameters_ref(cast(Gateway, obj))

    async def validate_update(
        self, old_obj: BaseManifest, new_obj: BaseManifest
    ) -> list[str]:
        self._check_kind(new_obj)
        return await self._check_parameters_ref(cast(Gateway, new_obj))

    async def validate_delete(self, obj: BaseManifest) -> list[str]:
        return []
