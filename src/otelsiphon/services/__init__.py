"""Ingestion services wrapping the OTLP transformation."""

from otelsiphon.services.receiver import OtlpReceiver

__all__ = ["OtlpReceiver"]
