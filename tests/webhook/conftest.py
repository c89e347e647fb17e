"""Test fixtures for the admission validators."""

from typing import Any

import pytest

from ingress_sync.exceptions import ListException
from ingress_sync.lister import ObjectLister
from ingress_sync.manifest import (
    BaseManifest,
    Gateway,
    GatewayClass,
    GatewayProxy,
    NamedResource,
    resource_id,
)

NAMESPACE = "test-ns"


class FakeLister(ObjectLister):
    """Lister over objects that tests create and delete."""

    def __init__(self) -> None:
        self.objects: dict[NamedResource, BaseManifest] = {}
        self.calls = 0

    def add(self, obj: BaseManifest) -> None:
        self.objects[resource_id(obj)] = obj

    def remove(self, obj: BaseManifest) -> None:
        del self.objects[resource_id(obj)]

    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        self.calls += 1
        return [
            obj
            for rid, obj in sorted(self.objects.items(), key=lambda item: str(item[0]))
            if rid.kind == kind and (namespace is None or rid.namespace == namespace)
        ]


class FailingLister(ObjectLister):
    """Lister whose API server is unavailable."""

    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        raise ListException(kind, "503 Service Unavailable")


@pytest.fixture
def lister() -> FakeLister:
    return FakeLister()


def gateway_class_doc(name: str) -> dict[str, Any]:
    return {
        "apiVersion": "gateway.networking.k8s.io/v1",
        "kind": "GatewayClass",
        "metadata": {"name": name},
        "spec": {"controllerName": "apisix.apache.org/apisix-ingress-controller"},
    }


def gateway_doc(
    name: str, gateway_class: str, proxy: str | None = None
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "apiVersion": "gateway.networking.k8s.io/v1",
        "kind": "Gateway",
        "metadata": {"name": name, "namespace": NAMESPACE},
        "spec": {
            "gatewayClassName": gateway_class,
            "listeners": [{"name": "http1", "protocol": "HTTP", "port": 80}],
        },
    }
    if proxy:
        doc["spec"]["infrastructure"] = {
            "parametersRef": {
                "group": "apisix.apache.org",
                "kind": "GatewayProxy",
                "name": proxy,
            }
        }
    return doc


def gateway_proxy_doc(
    name: str,
    *,
    service: str | None = None,
    endpoints: list[str] | None = None,
    secret: str | None = None,
    secret_key: str = "token",
    inline_key: str | None = None,
    namespace: str = NAMESPACE,
) -> dict[str, Any]:
    control_plane: dict[str, Any] = {}
    if service:
        control_plane["service"] = {"name": service, "port": 9180}
    if endpoints:
        control_plane["endpoints"] = endpoints
    admin_key: dict[str, Any] = {}
    if secret:
        admin_key["valueFrom"] = {"secretKeyRef": {"name": secret, "key": secret_key}}
    if inline_key:
        admin_key["value"] = inline_key
    if admin_key:
        control_plane["auth"] = {"type": "AdminKey", "adminKey": admin_key}
    return {
        "apiVersion": "apisix.apache.org/v1alpha1",
        "kind": "GatewayProxy",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"provider": {"type": "ControlPlane", "controlPlane": control_plane}},
    }


def make_gateway_class(name: str) -> GatewayClass:
    return GatewayClass.parse_doc(gateway_class_doc(name))


def make_gateway(name: str, gateway_class: str, proxy: str | None = None) -> Gateway:
    return Gateway.parse_doc(gateway_doc(name, gateway_class, proxy))


def make_gateway_proxy(name: str, **kwargs: Any) -> GatewayProxy:
    return GatewayProxy.parse_doc(gateway_proxy_doc(name, **kwargs))
