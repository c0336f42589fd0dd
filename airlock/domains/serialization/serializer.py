"""Recursive, permission-aware record serializer.

Per record:

1. look up the type's capabilities and resolve the requester's role;
2. intersect the role whitelist with the optional context whitelist;
3. load the requested relations that will be visible;
4. prune: keep only visible attributes and visible populated relations;
5. recurse into the kept relations and assemble the output.

An empty whitelist at step 1 or 2 makes the record ABSENT. Pruning is what
stops cycles (user -> groups -> members -> groups ...): a relation is only
followed when the tables admit it at that point of the chain.
"""

import asyncio
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Union

from airlock.core.config import AbsentRelationPolicy
from airlock.core.exceptions import ConfigurationErrorReason, SerializationConfigurationError
from airlock.core.logging import ContextualLogger, logger
from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.aggregator import CollectionAggregator
from airlock.domains.serialization.designation import (
    ContextDesignation,
    default_designator_arguments,
)
from airlock.domains.serialization.options import EngineConfig, SerializationOptions
from airlock.domains.serialization.protocols import CapabilityRegistryProtocol
from airlock.domains.serialization.relation_loader import RelationLoader
from airlock.domains.serialization.types import (
    ABSENT,
    Absent,
    PrunedRecord,
    RecordTypeCapabilities,
    RelationValue,
    SerializedRecord,
)
from airlock.domains.serialization.utils import maybe_await
from airlock.domains.serialization.visibility import VisibilityResolver

ENSURE_TABLE_NAME = "ensure_relations_loaded"

serializer_logger = logger.with_prefix("Serializer: ").with_context(component="serializer")


class Serializer:
    """Serializes one record and, through it, everything it may reveal."""

    def __init__(
        self,
        registry: CapabilityRegistryProtocol,
        config: EngineConfig,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the serializer.

        Args:
            registry: Capabilities for every record type that can be reached.
            config: Engine-construction configuration.
            logger: Logger to use; defaults to the module logger.
        """
        self._registry = registry
        self._config = config
        self._logger = logger or serializer_logger
        self._visibility = VisibilityResolver()
        self._loader = RelationLoader(
            handle_ensure_relation=config.handle_ensure_relation,
            force_load_invisible_relations=config.force_load_invisible_relations,
            emit_diagnostics=config.emit_diagnostics,
            logger=self._logger.with_context(component="relation_loader"),
        )
        self._aggregator = CollectionAggregator()
        self._designator_arguments = config.designator_arguments or default_designator_arguments

    def _capabilities(self, record: RecordProtocol) -> RecordTypeCapabilities:
        try:
            return self._registry.get(record.type_tag)
        except KeyError:
            raise SerializationConfigurationError(
                ConfigurationErrorReason.MISSING_ROLE_DETERMINER,
                f"role_determiner function was not defined for records of type: "
                f"{record.type_tag}",
            ) from None

    def _check_declared(self, capabilities: RecordTypeCapabilities, requested: List[str]) -> None:
        # Custom handlers may serve pseudo-relations the type does not declare.
        if not capabilities.relations or self._config.handle_ensure_relation is not None:
            return
        undeclared = [name for name in requested if name not in capabilities.relations]
        if undeclared:
            raise SerializationConfigurationError(
                ConfigurationErrorReason.UNDECLARED_RELATION,
                f"{ENSURE_TABLE_NAME}.{capabilities.type_tag} requests relations that "
                f"records of type {capabilities.type_tag} do not declare: "
                f"{', '.join(undeclared)}",
            )

    async def prune(
        self, record: RecordProtocol, options: SerializationOptions
    ) -> Union[PrunedRecord, Absent]:
        """Resolve visibility, load relations and snapshot what may be serialized.

        Returns:
            A PrunedRecord, or ABSENT if nothing about the record may be revealed.
        """
        capabilities = self._capabilities(record)

        if self._config.skip_unsaved_records and not record.is_persisted:
            return ABSENT

        role = await maybe_await(capabilities.role_determiner(record, record.accessor))
        role_visible = self._visibility.role_visible(capabilities, role)
        if not role_visible:
            return ABSENT

        designation = ContextDesignation(
            record, options.context_designator, self._designator_arguments
        )
        context_visible = await self._visibility.context_visible(
            options, record.type_tag, designation
        )
        visible = self._visibility.ultimately_visible(role_visible, context_visible)
        if not visible:
            return ABSENT

        attributes = record.attributes()
        if attributes or record.relation_names():
            entry = options.ensure_entry(record.type_tag)
            if entry is not None:
                requested = await designation.resolve(entry, ENSURE_TABLE_NAME)
                self._check_declared(capabilities, requested)
                await self._loader.ensure(record, requested, visible)
            # Handlers may have set derived attributes.
            attributes = record.attributes()

        visible_set = set(visible)
        relations = {
            name: record.related(name)
            for name in record.relation_names()
            if name in visible_set
        }
        return PrunedRecord(
            record=record,
            visible_properties=tuple(visible),
            attributes=MappingProxyType(
                {name: attributes[name] for name in visible if name in attributes}
            ),
            relations=MappingProxyType(relations),
        )

    async def serialize_record(
        self, record: RecordProtocol, options: SerializationOptions
    ) -> Union[SerializedRecord, Absent]:
        """Serialize a record for the accessor it carries.

        Returns:
            A dict keyed in whitelist order, or ABSENT.
        """
        pruned = await self.prune(record, options)
        if pruned is ABSENT:
            self._logger.debug(
                "Record resolved ABSENT",
                extra={
                    "type_tag": record.type_tag,
                    "relation_chain": "/".join(record.relation_chain),
                },
            )
            return ABSENT
        return await self._render(pruned, options)

    async def serialize_collection(
        self, records: List[RecordProtocol], options: SerializationOptions
    ) -> List[Any]:
        """Serialize every member, dropping ABSENT ones."""
        return await self._aggregator.aggregate(
            records, lambda member: self.serialize_record(member, options)
        )

    async def _serialize_relation(self, value: RelationValue, options: SerializationOptions) -> Any:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return await self.serialize_collection(list(value), options)
        return await self.serialize_record(value, options)

    async def _render(
        self, pruned: PrunedRecord, options: SerializationOptions
    ) -> SerializedRecord:
        names = list(pruned.relations)
        values = await asyncio.gather(
            *[self._serialize_relation(pruned.relations[name], options) for name in names]
        )
        serialized_relations = dict(zip(names, values))

        result: Dict[str, Any] = {}
        for name in pruned.visible_properties:
            if name in serialized_relations:
                value = serialized_relations[name]
                if value is ABSENT:
                    if self._config.absent_relation_policy == AbsentRelationPolicy.NULL:
                        result[name] = None
                    continue
                result[name] = value
            elif name in pruned.attributes:
                result[name] = pruned.attributes[name]

        # An empty dict here is an empty-but-present relation slot, never a
        # record with no visible properties (those are ABSENT).
        for name, value in result.items():
            if isinstance(value, dict) and not value:
                result[name] = None
        return result
