"""HTTP boundary helpers."""

from airlock.api.middleware import register_exception_handlers

__all__ = ["register_exception_handlers"]
