"""kubepilot: forward kubeconfig-authenticated operations and manifests to a Kubernetes API server."""

__version__ = "1.0.0"
