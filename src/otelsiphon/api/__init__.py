"""OTLP/HTTP API."""
