"""Core protocols for dependency injection.

Cross-cutting boundaries only; the serialization domain keeps its own
protocols in airlock/domains/serialization/protocols.py.
"""

from airlock.core.protocols.record import RecordProtocol
from airlock.core.protocols.registry import BaseRegistryEntry, RegistryProtocol

__all__ = [
    "BaseRegistryEntry",
    "RecordProtocol",
    "RegistryProtocol",
]
