"""otelsiphon - flatten OpenTelemetry (OTLP) logs into storage-ready records."""

__version__ = "0.1.0"
