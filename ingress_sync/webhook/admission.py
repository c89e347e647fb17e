"""Admission review dispatch for validating webhooks.

A `Validator` implements the checks for one kind of object. `review` invokes
the validator for the operation of the request and converts the outcome into
an `AdmissionResponse`. Any failure to reach a decision denies the request.
"""

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import ClassVar

from ingress_sync.config import DEFAULT_ADMISSION_TIMEOUT
from ingress_sync.context import trace_context
from ingress_sync.exceptions import AdmissionDenied, IngressSyncException
from ingress_sync.manifest import BaseManifest, resource_id

__all__ = [
    "Operation",
    "AdmissionRequest",
    "AdmissionResponse",
    "Validator",
    "review",
]

_LOGGER = logging.getLogger(__name__)


class Operation(StrEnum):
    """Operation of the write being admitted."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class AdmissionRequest:
    """A write submitted for admission."""

    operation: Operation
    """The operation being performed."""

    obj: BaseManifest
    """The new object, or the object being deleted."""

    old_obj: BaseManifest | None = None
    """The previous state of the object for an update."""

    timeout: float | None = DEFAULT_ADMISSION_TIMEOUT
    """Deadline in seconds for reaching a decision."""


@dataclass
class AdmissionResponse:
    """The admission decision returned to the client."""

    allowed: bool
    message: str | None = None
    warnings: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.allowed:
            return "allowed"
        return f"denied: {self.message}"


class Validator(ABC):
    """Validates writes of one kind of object.

    Methods return a list of warnings for the client, or raise
    `AdmissionDenied` to refuse the write.
    """

    kind: ClassVar[str]
    manifest_class: ClassVar[type[BaseManifest]]

    def _check_kind(self, obj: BaseManifest) -> None:
        if not isinstance(obj, self.manifest_class):
            raise AdmissionDenied(
                f"expected a {self.kind} object but got {obj.__class__.__name__}"
            )

    @abstractmethod
    async def validate_create(self, obj: BaseManifest) -> list[str]:
        """Validate the creation of an object."""

    @abstractmethod
    async def validate_update(
        self, old_obj: BaseManifest, new_obj: BaseManifest
    ) -> list[str]:
        """Validate the update of an object."""

    @abstractmethod
    async def validate_delete(self, obj: BaseManifest) -> list[str]:
        """Validate the deletion of an object."""


async def review(validator: Validator, request: AdmissionRequest) -> AdmissionResponse:
    """Run the validator for the request and return the admission decision."""
    rid = resource_id(request.obj)
    slow_threshold = request.timeout / 2 if request.timeout else None
    with trace_context(f"Review {request.operation} {rid}", slow_threshold):
        try:
            async with asyncio.timeout(request.timeout):
                if request.operation == Operation.CREATE:
                    warnings = await validator.validate_create(request.obj)
                elif request.operation == Operation.UPDATE:
                    warnings = await validator.validate_update(
                        request.old_obj or request.obj, request.obj
                    )
                else:
                    warnings = await validator.validate_delete(request.obj)
        except AdmissionDenied as err:
            _LOGGER.warning("Denied %s of %s: %s", request.operation, rid, err)
            return AdmissionResponse(allowed=False, message=str(err))
        except IngressSyncException as err:
            _LOGGER.error("Failed to validate %s of %s: %s", request.operation, rid, err)
            return AdmissionResponse(allowed=False, message=str(err))
        except TimeoutError:
            message = (
                f"timed out validating {request.operation} of {rid} "
                f"after {request.timeout}s"
            )
            _LOGGER.error(message)
            return AdmissionResponse(allowed=False, message=message)
    for warning in warnings:
        _LOGGER.info("Warning for %s of %s: %s", request.operation, rid, warning)
    return AdmissionResponse(allowed=True, warnings=warnings)
