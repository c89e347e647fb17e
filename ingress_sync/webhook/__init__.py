"""Validating admission webhooks for gateway objects.

Each validator guards one kind of object and is invoked through `review`
for every create, update and delete of that kind.
"""

from ingress_sync.lister import ObjectLister

from .admission import (
    AdmissionRequest,
    AdmissionResponse,
    Operation,
    Validator,
    review,
)
from .gateway import GatewayValidator
from .gatewayclass import GatewayClassValidator
from .gatewayproxy import GatewayProxyValidator

__all__ = [
    "AdmissionRequest",
    "AdmissionResponse",
    "Operation",
    "Validator",
    "review",
    "GatewayValidator",
    "GatewayClassValidator",
    "GatewayProxyValidator",
    "get_validator",
]


def get_validator(kind: str, lister: ObjectLister) -> Validator:
    """Return the validator guarding the kind of object."""
    for cls in (GatewayClassValidator, GatewayValidator, GatewayProxyValidator):
        if cls.kind == kind:
            return cls(lister)
    raise ValueError(f"No validator registered for kind {kind}")
