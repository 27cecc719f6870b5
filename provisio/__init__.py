"""Provisioning groundwork: run contexts, configuration, templated manifests and providers."""

__version__ = "0.1.0"