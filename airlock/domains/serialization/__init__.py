"""Permission-aware serialization of record graphs."""

from airlock.domains.serialization.engine import SerializationEngine
from airlock.domains.serialization.options import EngineConfig, SerializationOptions
from airlock.domains.serialization.registry import CapabilityRegistry
from airlock.domains.serialization.relation_loader import default_handle_ensure_relation
from airlock.domains.serialization.types import ABSENT, PrunedRecord, RecordTypeCapabilities

__all__ = [
    "ABSENT",
    "CapabilityRegistry",
    "EngineConfig",
    "PrunedRecord",
    "RecordTypeCapabilities",
    "SerializationEngine",
    "SerializationOptions",
    "default_handle_ensure_relation",
]
