"""Observability."""

from s3kit.observability.setupper import ObservabilitySetupper

__all__ = ["ObservabilitySetupper"]
