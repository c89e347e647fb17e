"""Tests for admission review dispatch."""

import asyncio

from ingress_sync.lister import ObjectLister
from ingress_sync.manifest import BaseManifest
from ingress_sync.webhook import (
    AdmissionRequest,
    AdmissionResponse,
    GatewayClassValidator,
    GatewayProxyValidator,
    Operation,
    Validator,
    get_validator,
    review,
)

from .conftest import FakeLister, make_gateway_class, make_gateway_proxy


class SlowLister(ObjectLister):
    """Lister that does not answer before the deadline."""

    async def list_objects(
        self, kind: str, namespace: str | None = None
    ) -> list[BaseManifest]:
        await asyncio.sleep(10)
        return []


class RecordingValidator(Validator):
    kind = "GatewayProxy"

    def __init__(self) -> None:
        self.calls: list[tuple[str, BaseManifest, BaseManifest | None]] = []

    async def validate_create(self, obj: BaseManifest) -> list[str]:
        self.calls.append(("create", obj, None))
        return ["created"]

    async def validate_update(
        self, old_obj: BaseManifest, new_obj: BaseManifest
    ) -> list[str]:
        self.calls.append(("update", new_obj, old_obj))
        return []

    async def validate_delete(self, obj: BaseManifest) -> list[str]:
        self.calls.append(("delete", obj, None))
        return []


async def test_dispatch_by_operation() -> None:
    validator = RecordingValidator()
    old = make_gateway_proxy("a", service="svc-1")
    new = make_gateway_proxy("a", service="svc-2")

    response = await review(validator, AdmissionRequest(Operation.CREATE, new))
    assert response == AdmissionResponse(allowed=True, warnings=["created"])
    await review(validator, AdmissionRequest(Operation.UPDATE, new, old_obj=old))
    await review(validator, AdmissionRequest(Operation.DELETE, old))

    assert validator.calls == [
        ("create", new, None),
        ("update", new, old),
        ("delete", old, None),
    ]


async def test_update_without_old_object() -> None:
    validator = RecordingValidator()
    new = make_gateway_proxy("a", service="svc")
    await review(validator, AdmissionRequest(Operation.UPDATE, new))
    assert validator.calls == [("update", new, new)]


async def test_timeout_denies() -> None:
    """Test a validation exceeding the deadline is denied."""
    gateway_class = make_gateway_class("apisix")
    response = await review(
        GatewayClassValidator(SlowLister()),
        AdmissionRequest(Operation.DELETE, gateway_class, timeout=0.01),
    )
    assert not response.allowed
    assert response.message == (
        "timed out validating DELETE of GatewayClass/apisix after 0.01s"
    )
    assert str(response).startswith("denied: timed out")


def test_get_validator(lister: FakeLister) -> None:
    assert isinstance(get_validator("GatewayClass", lister), GatewayClassValidator)
    assert isinstance(get_validator("GatewayProxy", lister), GatewayProxyValidator)
