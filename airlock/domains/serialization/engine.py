"""Serialization engine: the public entry point.

Usage:
    registry = CapabilityRegistry()
    registry.build([user_capabilities, group_capabilities])
    engine = SerializationEngine(registry)

    payload = await engine.serialize(user_record, SerializationOptions(
        ensure_relations_loaded={"users": ["groups"]},
    ))
    if payload is ABSENT:
        raise NotFoundException()
"""

from typing import Any, List, Optional, Sequence, Union

from airlock.core.logging import ContextualLogger, logger
from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.aggregator import CollectionAggregator
from airlock.domains.serialization.options import EngineConfig, SerializationOptions
from airlock.domains.serialization.protocols import CapabilityRegistryProtocol
from airlock.domains.serialization.serializer import Serializer
from airlock.domains.serialization.types import Absent, SerializedRecord

engine_logger = logger.with_prefix("SerializationEngine: ").with_context(
    component="serialization_engine"
)


class SerializationEngine:
    """Serializes records and collections for the requester they carry.

    Built once with a capability registry and engine configuration; safe to
    share between concurrent requests since it holds no per-call state.
    """

    def __init__(
        self,
        registry: CapabilityRegistryProtocol,
        config: Optional[EngineConfig] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Capabilities for every record type that can be reached.
            config: Engine configuration; defaults follow the process settings.
            logger: Logger to use; defaults to the module logger.
        """
        self.config = config or EngineConfig()
        self._logger = logger or engine_logger
        self._serializer = Serializer(registry, self.config, logger=self._logger)
        self._aggregator = CollectionAggregator()

    @staticmethod
    def _bind(record: RecordProtocol, options: SerializationOptions) -> RecordProtocol:
        # A rebound root hands the override to everything it relates to.
        if options.overrides_accessor:
            return record.with_accessor(options.accessor)
        return record

    async def serialize(
        self, record: RecordProtocol, options: Optional[SerializationOptions] = None
    ) -> Union[SerializedRecord, Absent]:
        """Serialize one record.

        Note that relations requested through ``ensure_relations_loaded`` are
        loaded onto ``record``; nothing is removed from it.

        Returns:
            The serialized dict, or ABSENT if the requester may not see the record.

        Raises:
            SerializationConfigurationError: If the configuration is unusable
                for any record reached.
        """
        options = options or SerializationOptions()
        return await self._serializer.serialize_record(self._bind(record, options), options)

    async def serialize_collection(
        self,
        records: Sequence[RecordProtocol],
        options: Optional[SerializationOptions] = None,
    ) -> List[Any]:
        """Serialize a collection, omitting members the requester may not see.

        Each member is serialized for its own accessor unless the options
        override it.
        """
        options = options or SerializationOptions()
        return await self._aggregator.aggregate(
            list(records),
            lambda member: self._serializer.serialize_record(self._bind(member, options), options),
        )
