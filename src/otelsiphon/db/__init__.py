"""Database storage for flat log records."""
