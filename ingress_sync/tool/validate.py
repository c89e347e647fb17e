"""Command line tool for running the admission validators against local manifests."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import pathlib
import sys
from typing import cast

from ingress_sync.config import AdmissionConfig
from ingress_sync.exceptions import InputException
from ingress_sync.lister import StaticLister
from ingress_sync.manifest import (
    GATEWAY_CLASS_KIND,
    GATEWAY_KIND,
    GATEWAY_PROXY_KIND,
    read_objects,
)
from ingress_sync.webhook import AdmissionRequest, Operation, get_validator, review


_LOGGER = logging.getLogger(__name__)

ALLOWED = "[ADMISSION ALLOWED]"
DENIED = "[ADMISSION DENIED]"


class ValidateAction:
    """Ingress-sync validate action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "validate",
                help="Run the admission validator for an object against local manifests",
                description=(
                    "Check whether a write of an object would be admitted given the "
                    "objects in a directory of manifests."
                ),
            ),
        )
        args.add_argument(
            "--path",
            help="Path to a manifest file or a directory of manifests",
            type=pathlib.Path,
            required=True,
        )
        args.add_argument(
            "--kind",
            choices=[GATEWAY_CLASS_KIND, GATEWAY_KIND, GATEWAY_PROXY_KIND],
            required=True,
            help="Kind of the object being written",
        )
        args.add_argument("--name", required=True, help="Name of the object")
        args.add_argument(
            "--namespace",
            default=None,
            help="Namespace of the object, required when the name is ambiguous",
        )
        args.add_argument(
            "--operation",
            choices=[op.value.lower() for op in Operation],
            default="create",
            help="The write operation to validate",
        )
        args.add_argument(
            "--timeout",
            type=float,
            default=AdmissionConfig().timeout,
            help="Deadline in seconds for the validation",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        kind: str,
        name: str,
        namespace: str | None,
        operation: str,
        timeout: float | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        objects = await read_objects(path)
        matches = [
            obj
            for obj in objects
            if getattr(obj, "kind", None) == kind
            and getattr(obj, "name", None) == name
            and (namespace is None or getattr(obj, "namespace", None) == namespace)
        ]
        if not matches:
            raise InputException(f"{kind} {name} not found in {path}")
        if len(matches) > 1:
            raise InputException(
                f"{kind} {name} is ambiguous in {path}, specify --namespace"
            )

        validator = get_validator(kind, StaticLister(objects))
        request = AdmissionRequest(
            operation=Operation(operation.upper()), obj=matches[0], timeout=timeout
        )
        response = await review(validator, request)
        for warning in response.warnings:
            print(f"Warning: {warning}")
        if not response.allowed:
            print(f"{DENIED}: {response.message}")
            sys.exit(1)
        print(ALLOWED)
