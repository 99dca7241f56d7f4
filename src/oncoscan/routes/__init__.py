"""Route modules for FastAPI application."""
from . import predict

__all__ = ["predict"]
