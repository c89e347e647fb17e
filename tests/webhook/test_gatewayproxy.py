"""Tests for the GatewayProxy conflict validator."""

import pytest

from ingress_sync.webhook import (
    AdmissionRequest,
    GatewayProxyValidator,
    Operation,
    review,
)

from .conftest import (
    FailingLister,
    FakeLister,
    NAMESPACE,
    make_gateway_proxy,
)

ENDPOINT_A = "https://127.0.0.1:9443"
ENDPOINT_B = "https://10.0.0.1:9443"
ENDPOINT_C = "https://192.168.0.1:9443"


@pytest.fixture
def validator(lister: FakeLister) -> GatewayProxyValidator:
    return GatewayProxyValidator(lister)


async def test_conflict_on_service_and_secret(
    lister: FakeLister, validator: GatewayProxyValidator
) -> None:
    """Test a second proxy reusing the Service and AdminKey secret is refused."""
    primary = make_gateway_proxy("primary", service="shared-svc", secret="shared-secret")
    lister.add(primary)

    conflict = make_gateway_proxy(
        "conflict", service="shared-svc", secret="shared-secret"
    )
    response = await review(
        validator, AdmissionRequest(operation=Operation.CREATE, obj=conflict)
    )
    assert not response.allowed
    assert response.message == (
        "gateway proxy configuration conflict: "
        f"GatewayProxy {NAMESPACE}/conflict conflicts with {NAMESPACE}/primary "
        f"on Service {NAMESPACE}/shared-svc "
        f"and AdminKey secret {NAMESPACE}/shared-secret key token"
    )

    other = make_gateway_proxy("other", service="unique-svc", secret="shared-secret")
    response = await review(
        validator, AdmissionRequest(operation=Operation.CREATE, obj=other)
    )
    assert response.allowed


async def test_conflict_on_endpoints_and_inline_value(
    lister: FakeLister, validator: GatewayProxyValidator
) -> None:
    """Test a single shared endpoint with the same inline AdminKey is refused."""
    lister.add(
        make_gateway_proxy(
            "inline-primary",
            endpoints=[ENDPOINT_A, ENDPOINT_B],
            inline_key="inline-credential",
        )
    )
    conflict = make_gateway_proxy(
        "inline-conflict",
        endpoints=[ENDPOINT_B, ENDPOINT_C],
        inline_key="inline-credential",
    )
    response = await review(
        validator, AdmissionRequest(operation=Operation.CREATE, obj=conflict)
    )
    assert not response.allowed
    assert response.message is not None
    assert "gateway proxy configuration conflict" in response.message
    assert f"{NAMESPACE}/inline-conflict" in response.message
    assert f"{NAMESPACE}/inline-primary" in response.message
    assert f"control plane endpoints [{ENDPOINT_B}]" in response.message
    assert "inline AdminKey value" in response.message


@pytest.mark.parametrize(
    ("existing", "candidate"),
    [
        (
            {"service": "svc", "secret": "secret-a"},
            {"service": "svc", "secret": "secret-b"},
        ),
        (
            {"service": "svc", "secret": "secret", "secret_key": "token"},
            {"service": "svc", "secret": "secret", "secret_key": "other"},
        ),
        (
            {"service": "svc-a", "secret": "secret"},
            {"service": "svc-b", "secret": "secret"},
        ),
        (
            {"endpoints": [ENDPOINT_A], "inline_key": "key"},
            {"endpoints": [ENDPOINT_B], "inline_key": "key"},
        ),
        (
            {"endpoints": [ENDPOINT_A], "inline_key": "key-a"},
            {"endpoints": [ENDPOINT_A], "inline_key": "key-b"},
        ),
        (
            {"service": "svc", "secret": "secret"},
            {"service": "svc", "secret": "secret", "namespace": "other-ns"},
        ),
        (
            {"service": "svc"},
            {"service": "svc"},
        ),
        (
            {"endpoints": [ENDPOINT_A], "secret": "secret"},
            {"service": "svc", "secret": "secret"},
        ),
    ],
    ids=[
        "different-secret",
        "different-secret-key",
        "different-service",
        "disjoint-endpoints",
        "different-inline-value",
        "different-namespace",
        "no-credentials",
        "endpoints-and-service",
    ],
)
async def test_no_conflict(
    lister: FakeLister,
    validator: GatewayProxyValidator,
    existing: dict,
    candidate: dict,
) -> None:
    """Test a shared target or a shared credential alone is allowed."""
    lister.add(make_gateway_proxy("existing", **existing))
    response = await review(
        validator,
        AdmissionRequest(
            operation=Operation.CREATE, obj=make_gateway_proxy("candidate", **candidate)
        ),
    )
    assert response.allowed, response.message


async def test_conflict_on_service_and_inline_value(
    lister: FakeLister, validator: GatewayProxyValidator
) -> None:
    lister.add(make_gateway_proxy("existing", service="svc", inline_key="key"))
    response = await review(
        validator,
        AdmissionRequest(
            operation=Operation.CREATE,
            obj=make_gateway_proxy("candidate", service="svc", inline_key="key"),
        ),
    )
    assert not response.allowed
    assert response.message is not None
    assert response.message.endswith(
        f"on Service {NAMESPACE}/svc and inline AdminKey value"
    )


async def test_update_unchanged(
    lister: FakeLister, validator: GatewayProxyValidator
) -> None:
    """Test updating a proxy never conflicts with its own previous state."""
    proxy = make_gateway_proxy("a", service="svc", secret="secret")
    lister.add(proxy)

    response = await review(
        validator,
        AdmissionRequest(operation=Operation.UPDATE, obj=proxy, old_obj=proxy),
    )
    assert response.allowed


async def test_update_introduces_conflict(
    lister: FakeLister, validator: GatewayProxyValidator
) -> None:
    """Test updating a proxy onto another proxy's Service and secret is refused."""
    proxy_a = make_gateway_proxy("update-a", service="shared-svc", secret="secret")
    proxy_b = make_gateway_proxy("update-b", service="unique-svc", secret="secret")
    lister.add(proxy_a)
    lister.add(proxy_b)

    updated_b = make_gateway_proxy("update-b", service="shared-svc", secret="secret")
    response = await review(
        validator,
        AdmissionRequest(operation=Operation.UPDATE, obj=updated_b, old_obj=proxy_b),
    )
    assert not response.allowed
    assert response.message is not None
    assert f"{NAMESPACE}/update-a" in response.message
    assert f"{NAMESPACE}/update-b" in response.message


async def test_delete_allowed(validator: GatewayProxyValidator) -> None:
    response = await review(
        validator,
        AdmissionRequest(
            operation=Operation.DELETE,
            obj=make_gateway_proxy("a", service="svc", secret="secret"),
        ),
    )
    assert response.allowed


async def test_list_failure_denies() -> None:
    """Test a listing failure denies the write."""
    response = await review(
        GatewayProxyValidator(FailingLister()),
        AdmissionRequest(
            operation=Operation.CREATE,
            obj=make_gateway_proxy("a", service="svc", secret="secret"),
        ),
    )
    assert not response.allowed
    assert response.message == "failed to list GatewayProxy: 503 Service Unavailable"
