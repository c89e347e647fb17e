"""Read-only queries of live objects used by the admission guards.

Guards must decide against the state of the cluster at the time of the
request, so listers never cache results.
"""

from abc import ABC, abstractmethod
import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
import logging
from typing import Any

from kubernetes import client, config as kube_config
from kubernetes.client.exceptions import ApiException
import urllib3

from .config import KubernetesConfig
from .exceptions import InputException, ListException
from .manifest import (
    BaseManifest,
    GATEWAY_CLASS_KIND,
    GATEWAY_KIND,
    GATEWAY_PROXY_KIND,
    parse_raw_obj,
)

__all__ = [
    "ObjectLister",
    "KubernetesLister",
    "StaticLister",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ResourceType:
    """API coordinates of a custom resource kind."""

    group: str
    version: str
    plural: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


RESOURCE_TYPES: dict[str, _ResourceType] = {
    GATEWAY_CLASS_KIND: _ResourceType(
        "gateway.networking.k8s.io", "v1", "gatewayclasses", namespaced=False
    ),
    GATEWAY_KIND: _ResourceType("gateway.networking.k8s.io", "v1", "gateways"),
    GATEWAY_PROXY_KIND: _ResourceType("apisix.apache.org", "v1alpha1", "gatewayproxies"),
}


class ObjectLister(ABC):
    """Lists live objects of a kind."""

    @abstractmethod
    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        """Return every object of the kind, optionally within a single namespace.

        Raises:
            ListException: If the objects could not be listed.
        """


class KubernetesLister(ObjectLister):
    """Lists objects from the Kubernetes API server."""

    def __init__(self, api: client.CustomObjectsApi) -> None:
        """Initialize the lister with a custom objects API client."""
        self._api = api

    @classmethod
    def from_config(cls, kube: KubernetesConfig) -> "KubernetesLister":
        """Create a lister from in-cluster or kubeconfig credentials."""
        if kube.in_cluster:
            kube_config.load_incluster_config()
        else:
            kube_config.load_kube_config(config_file=kube.kubeconfig)
        return cls(client.CustomObjectsApi())

    def _list(self, kind: str, namespace: str | None) -> list[dict[str, Any]]:
        if not (resource_type := RESOURCE_TYPES.get(kind)):
            raise InputException(f"Unsupported kind for listing: {kind}")
        if namespace and resource_type.namespaced:
            result = self._api.list_namespaced_custom_object(
                resource_type.group,
                resource_type.version,
                namespace,
                resource_type.plural,
            )
        else:
            result = self._api.list_cluster_custom_object(
                resource_type.group, resource_type.version, resource_type.plural
            )
        items = result.get("items", [])
        for item in items:
            # Items of a list response may omit the type meta
            item.setdefault("apiVersion", resource_type.api_version)
            item.setdefault("kind", kind)
        return items

    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        """Return every object of the kind from the API server."""
        try:
            items = await asyncio.to_thread(self._list, kind, namespace)
        except ApiException as err:
            raise ListException(kind, f"{err.status} {err.reason}") from err
        except urllib3.exceptions.HTTPError as err:
            raise ListException(kind, str(err)) from err
        _LOGGER.debug("Listed %d %s objects", len(items), kind)
        return [parse_raw_obj(item) for item in items]


class StaticLister(ObjectLister):
    """Lists objects from a fixed collection, e.g. manifests read from disk."""

    def __init__(self, objects: Iterable[BaseManifest]) -> None:
        """Initialize the lister with the objects to serve."""
        self._objects = list(objects)

    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        """Return the objects of the kind."""
        return [
            obj
            for obj in self._objects
            if getattr(obj, "kind", None) == kind
            and (namespace is None or getattr(obj, "namespace", None) == namespace)
        ]
