"""Exceptions related to ingress-sync."""

__all__ = [
    "IngressSyncException",
    "InputException",
    "AdmissionDenied",
    "ListException",
    "SyncException",
]


class IngressSyncException(Exception):
    """Generic base exception used for this library."""


class InputException(IngressSyncException):
    """Raised when the input objects are not formatted as expected."""


class AdmissionDenied(IngressSyncException):
    """Raised by a validator when a write must be refused.

    The message is returned verbatim to the client that submitted the write.
    """


class ListException(IngressSyncException):
    """Raised when listing live objects failed.

    Admission is denied since the current state could not be observed.
    """

    def __init__(self, kind: str, message: str | None) -> None:
        super().__init__(f"failed to list {kind}: {message or 'Unknown error'}")
        self.kind = kind
        self.message = message


class SyncException(IngressSyncException):
    """Raised when pushing configuration to the data plane failed."""
