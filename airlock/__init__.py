"""Airlock: permission-aware serialization of record graphs.

Usage:
    from airlock import (
        CapabilityRegistry,
        RecordTypeCapabilities,
        SerializationEngine,
        SerializationOptions,
    )
"""

from airlock.core.config import AbsentRelationPolicy
from airlock.core.exceptions import (
    AirlockException,
    ConfigurationErrorReason,
    SerializationConfigurationError,
)
from airlock.core.protocols import RecordProtocol
from airlock.domains.serialization import (
    ABSENT,
    CapabilityRegistry,
    EngineConfig,
    PrunedRecord,
    RecordTypeCapabilities,
    SerializationEngine,
    SerializationOptions,
    default_handle_ensure_relation,
)

__all__ = [
    "ABSENT",
    "AbsentRelationPolicy",
    "AirlockException",
    "CapabilityRegistry",
    "ConfigurationErrorReason",
    "EngineConfig",
    "PrunedRecord",
    "RecordProtocol",
    "RecordTypeCapabilities",
    "SerializationConfigurationError",
    "SerializationEngine",
    "SerializationOptions",
    "default_handle_ensure_relation",
]
