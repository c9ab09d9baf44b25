"""Custom exceptions for otelsiphon."""


class OtelSiphonError(Exception):
    """Base class for all otelsiphon errors."""


class PayloadDecodeError(OtelSiphonError):
    """Raised when an OTLP request envelope cannot be decoded."""


class PayloadTooLargeError(PayloadDecodeError):
    """Raised when a (decompressed) payload exceeds the configured limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"OTLP payload of {size} bytes exceeds max size of {limit} bytes")


class SinkError(OtelSiphonError):
    """Raised when a sink fails to accept a batch of records."""

    def __init__(self, message: str, record_count: int = 0):
        self.record_count = record_count
        super().__init__(message)


class ConfigurationError(OtelSiphonError):
    """Raised when settings describe an unusable configuration."""
