"""Representation of the Kubernetes objects inspected by the admission guards.

Objects are parsed from raw Kubernetes documents (as returned by the API server
or read from yaml files) into typed dataclasses that only carry the fields the
guards depend on.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, ClassVar

import aiofiles
import yaml
from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "NamedResource",
    "BaseManifest",
    "RawObject",
    "GatewayClass",
    "Gateway",
    "ParametersReference",
    "GatewayProxy",
    "ControlPlaneProvider",
    "ServiceReference",
    "SecretKeyReference",
    "parse_raw_obj",
    "resource_id",
    "read_objects",
]

_LOGGER = logging.getLogger(__name__)


# Match a prefix of apiVersion to ensure we have the right type of object.
# We don't check specific versions for forward compatibility on upgrade.
GATEWAY_API_DOMAIN = "gateway.networking.k8s.io"
APISIX_DOMAIN = "apisix.apache.org"
GATEWAY_CLASS_KIND = "GatewayClass"
GATEWAY_KIND = "Gateway"
GATEWAY_PROXY_KIND = "GatewayProxy"
DEFAULT_NAMESPACE = "default"
PROVIDER_TYPE_CONTROL_PLANE = "ControlPlane"
AUTH_TYPE_ADMIN_KEY = "AdminKey"
GUARDED_KINDS = (GATEWAY_CLASS_KIND, GATEWAY_KIND, GATEWAY_PROXY_KIND)


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if not api_version.startswith(version):
        raise InputException(f"Invalid object expected '{version}': {doc}")


def _metadata_name(cls: type, doc: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """Return the object name and metadata, raising on a malformed document."""
    if not (metadata := doc.get("metadata")):
        raise InputException(f"Invalid {cls} missing metadata: {doc}")
    if not (name := metadata.get("name")):
        raise InputException(f"Invalid {cls} missing metadata.name: {doc}")
    return name, metadata


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the object."""
        return self.to_dict()

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class RawObject(BaseManifest):
    """Raw kubernetes object of a kind without a typed representation."""

    kind: str
    """The kind of the object."""

    api_version: str
    """The apiVersion of the object."""

    name: str
    """The name of the object."""

    namespace: str | None
    """The namespace of the object."""

    spec: dict[str, Any] | None = None
    """The spec of the object."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "RawObject":
        """Parse a RawObject from a raw kubernetes object."""
        if not (api_version := doc.get("apiVersion")):
            raise InputException(f"Invalid object missing apiVersion: {doc}")
        name, metadata = _metadata_name(cls, doc)
        return cls(
            kind=doc["kind"],
            api_version=api_version,
            name=name,
            namespace=metadata.get("namespace"),
            spec=doc.get("spec", {}),
        )


@dataclass
class GatewayClass(BaseManifest):
    """A cluster scoped GatewayClass from the Gateway API."""

    kind: ClassVar[str] = GATEWAY_CLASS_KIND
    """The kind of the object."""

    name: str
    """The name of the GatewayClass."""

    controller_name: str | None = None
    """The controller that manages Gateways of this class."""

    namespace: ClassVar[str | None] = None

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "GatewayClass":
        """Parse a GatewayClass from a kubernetes resource."""
        _check_version(doc, GATEWAY_API_DOMAIN)
        name, _ = _metadata_name(cls, doc)
        spec = doc.get("spec") or {}
        return cls(name=name, controller_name=spec.get("controllerName"))


@dataclass
class ParametersReference(BaseManifest):
    """Reference from a Gateway to its infrastructure parameters object."""

    kind: str
    """The kind of the referenced object."""

    name: str
    """The name of the referenced object, in the Gateway namespace."""

    group: str | None = None
    """The API group of the referenced object."""


@dataclass
class Gateway(BaseManifest):
    """A Gateway from the Gateway API."""

    kind: ClassVar[str] = GATEWAY_KIND
    """The kind of the object."""

    name: str
    """The name of the Gateway."""

    namespace: str
    """The namespace of the Gateway."""

    gateway_class_name: str
    """The name of the GatewayClass this Gateway belongs to."""

    parameters_ref: ParametersReference | None = None
    """Optional reference to the infrastructure parameters."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Gateway":
        """Parse a Gateway from a kubernetes resource."""
        _check_version(doc, GATEWAY_API_DOMAIN)
        name, metadata = _metadata_name(cls, doc)
        if not (spec := doc.get("spec")):
            raise InputException(f"Invalid {cls} missing spec: {doc}")
        if not (gateway_class_name := spec.get("gatewayClassName")):
            raise InputException(f"Invalid {cls} missing spec.gatewayClassName: {doc}")
        parameters_ref = None
        if ref := (spec.get("infrastructure") or {}).get("parametersRef"):
            if not ref.get("kind") or not ref.get("name"):
                raise InputException(
                    f"Invalid {cls} spec.infrastructure.parametersRef requires kind and name: {doc}"
                )
            parameters_ref = ParametersReference(
                kind=ref["kind"], name=ref["name"], group=ref.get("group")
            )
        return cls(
            name=name,
            namespace=metadata.get("namespace") or DEFAULT_NAMESPACE,
            gateway_class_name=gateway_class_name,
            parameters_ref=parameters_ref,
        )


@dataclass
class ServiceReference(BaseManifest):
    """A Service exposing the control plane admin API."""

    namespace: str
    name: str
    port: int | None = None

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class SecretKeyReference(BaseManifest):
    """A key within a Secret holding the admin key."""

    namespace: str
    name: str
    key: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name} key {self.key}"


@dataclass
class ControlPlaneProvider(BaseManifest):
    """Connection settings for a control plane admin API."""

    service: ServiceReference | None = None
    """Service fronting the admin API, mutually exclusive with endpoints."""

    endpoints: list[str] = field(default_factory=list)
    """Admin API URLs."""

    admin_key_secret: SecretKeyReference | None = None
    """Secret holding the admin key."""

    admin_key_value: str | None = field(metadata={"serialize": "omit"}, default=None)
    """Admin key provided inline in the object."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any], namespace: str) -> "ControlPlaneProvider":
        """Parse the spec.provider.controlPlane of a GatewayProxy."""
        service = None
        if service_doc := doc.get("service"):
            if not (service_name := service_doc.get("name")):
                raise InputException(f"Invalid {cls} missing service.name: {doc}")
            service = ServiceReference(
                namespace=namespace, name=service_name, port=service_doc.get("port")
            )
        admin_key_secret = None
        admin_key_value = None
        auth = doc.get("auth") or {}
        if auth.get("type", AUTH_TYPE_ADMIN_KEY) == AUTH_TYPE_ADMIN_KEY and (
            admin_key := auth.get("adminKey")
        ):
            admin_key_value = admin_key.get("value") or None
            if ref := (admin_key.get("valueFrom") or {}).get("secretKeyRef"):
                if not ref.get("name") or not ref.get("key"):
                    raise InputException(
                        f"Invalid {cls} secretKeyRef requires name and key: {doc}"
                    )
                admin_key_secret = SecretKeyReference(
                    namespace=namespace, name=ref["name"], key=ref["key"]
                )
        return cls(
            service=service,
            endpoints=list(doc.get("endpoints") or []),
            admin_key_secret=admin_key_secret,
            admin_key_value=admin_key_value,
        )


@dataclass
class GatewayProxy(BaseManifest):
    """A GatewayProxy describing how to reach and authenticate to the data plane."""

    kind: ClassVar[str] = GATEWAY_PROXY_KIND
    """The kind of the object."""

    name: str
    """The name of the GatewayProxy."""

    namespace: str
    """The namespace of the GatewayProxy."""

    control_plane: ControlPlaneProvider | None = None
    """The control plane provider, if the provider type is ControlPlane."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "GatewayProxy":
        """Parse a GatewayProxy from a kubernetes resource."""
        _check_version(doc, APISIX_DOMAIN)
        name, metadata = _metadata_name(cls, doc)
        namespace = metadata.get("namespace") or DEFAULT_NAMESPACE
        control_plane = None
        provider = (doc.get("spec") or {}).get("provider") or {}
        if provider.get("type") == PROVIDER_TYPE_CONTROL_PLANE and (
            cp_doc := provider.get("controlPlane")
        ):
            control_plane = ControlPlaneProvider.parse_doc(cp_doc, namespace)
        return cls(name=name, namespace=namespace, control_plane=control_plane)


def parse_raw_obj(obj: dict[str, Any]) -> BaseManifest:
    """Parse a raw kubernetes object into a BaseManifest."""
    if not (kind := obj.get("kind")):
        raise InputException(f"Invalid object missing kind: {obj}")
    if not (api_version := obj.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {obj}")
    if kind == GATEWAY_CLASS_KIND and api_version.startswith(GATEWAY_API_DOMAIN):
        return GatewayClass.parse_doc(obj)
    if kind == GATEWAY_KIND and api_version.startswith(GATEWAY_API_DOMAIN):
        return Gateway.parse_doc(obj)
    if kind == GATEWAY_PROXY_KIND and api_version.startswith(APISIX_DOMAIN):
        return GatewayProxy.parse_doc(obj)
    return RawObject.parse_doc(obj)


def resource_id(obj: BaseManifest) -> NamedResource:
    """Return the identity of a parsed manifest object."""
    if not hasattr(obj, "kind") or not hasattr(obj, "name"):
        raise ValueError(f"Object must have kind and name attributes: {obj}")
    return NamedResource(obj.kind, getattr(obj, "namespace", None), obj.name)


async def read_objects(path: Path) -> list[BaseManifest]:
    """Return the objects of every yaml document under the path.

    Documents that are not kubernetes objects are skipped, as are malformed
    objects of kinds the admission guards do not inspect.
    """
    files = [path] if path.is_file() else sorted(path.rglob("*.y*ml"))
    results: list[BaseManifest] = []
    for file in files:
        async with aiofiles.open(str(file)) as fd:
            content = await fd.read()
        try:
            docs = list(yaml.safe_load_all(content))
        except yaml.YAMLError as err:
            raise InputException(f"`{file}` failed to parse as yaml: {err}") from err
        for doc in docs:
            if not isinstance(doc, dict) or "kind" not in doc:
                _LOGGER.debug("Skipping non-object document in %s", file)
                continue
            try:
                results.append(parse_raw_obj(doc))
            except InputException as err:
                if doc["kind"] in GUARDED_KINDS:
                    raise
                _LOGGER.debug("Skipping unparseable object in %s: %s", file, err)
    return results
