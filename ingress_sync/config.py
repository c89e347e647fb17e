"""Configuration objects for ingress-sync."""

from dataclasses import dataclass

DEFAULT_ADMISSION_TIMEOUT = 10.0


@dataclass
class AdmissionConfig:
    """Configuration for admission reviews."""

    timeout: float | None = DEFAULT_ADMISSION_TIMEOUT
    """Deadline in seconds for a single review, or None for no deadline."""


@dataclass
class KubernetesConfig:
    """Configuration for connecting to the Kubernetes API."""

    in_cluster: bool = False
    """Load the service account configuration of the pod."""

    kubeconfig: str | None = None
    """Path to a kubeconfig file, defaults to the client's lookup rules."""
