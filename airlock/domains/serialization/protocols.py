"""Protocols for the serialization domain."""

from typing import Protocol

from airlock.core.protocols.registry import RegistryProtocol
from airlock.domains.serialization.types import RecordTypeCapabilities


class CapabilityRegistryProtocol(RegistryProtocol[RecordTypeCapabilities], Protocol):
    """Per-type serialization capabilities, looked up by type tag."""

    def register(self, capabilities: RecordTypeCapabilities) -> None:
        """Register (or replace) the capabilities of one record type."""
        ...
