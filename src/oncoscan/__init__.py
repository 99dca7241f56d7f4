"""OncoScan: binary cancer image classification behind a small HTTP API."""

__version__ = "0.1.0"
