"""Types for the serialization domain."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Sequence, Tuple, Union

from pydantic import model_validator

from airlock.core.exceptions import ConfigurationErrorReason, SerializationConfigurationError
from airlock.core.protocols.record import RecordProtocol
from airlock.core.protocols.registry import BaseRegistryEntry
from airlock.domains.serialization.utils import is_name_list


class Absent:
    """Serialization outcome meaning "must not be revealed".

    Distinct from None (an explicit null) and from {} (an empty record).
    Falsy, and a singleton so identity checks are safe.
    """

    _instance = None

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT = Absent()

Role = str
RoleDeterminer = Callable[[RecordProtocol, Any], Union[Role, Awaitable[Role]]]
RelationValue = Union[RecordProtocol, Sequence[RecordProtocol], None]
SerializedRecord = Dict[str, Any]


class RecordTypeCapabilities(BaseRegistryEntry):
    """Everything the serializer needs to know about one record type.

    ``roles_to_visible_properties`` is a whitelist: a role sees only the
    properties listed for it, and an empty list means records of this type
    are never revealed to that role.

    ``relations`` declares the relation names records of this type have.
    When non-empty, requesting any other name through
    ``ensure_relations_loaded`` with the default relation handler is a
    configuration error.
    """

    role_determiner: Callable[..., Any]
    roles_to_visible_properties: Dict[str, List[str]]
    relations: Tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def validate_capabilities(cls, data: Any) -> Any:
        """Reject incomplete capabilities at registration time."""
        if not isinstance(data, dict):
            return data
        type_tag = data.get("type_tag")

        if not callable(data.get("role_determiner")):
            raise SerializationConfigurationError(
                ConfigurationErrorReason.MISSING_ROLE_DETERMINER,
                f"role_determiner function was not defined for records of type: {type_tag}",
            )

        table = data.get("roles_to_visible_properties")
        if not isinstance(table, Mapping):
            raise SerializationConfigurationError(
                ConfigurationErrorReason.MISSING_VISIBILITY_TABLE,
                f"roles_to_visible_properties was not defined for records of type: {type_tag}",
            )

        for role, properties in table.items():
            if not is_name_list(properties):
                raise SerializationConfigurationError(
                    ConfigurationErrorReason.NON_ARRAY_VISIBLE_SET,
                    f"roles_to_visible_properties for type {type_tag} does not contain "
                    f"a list of visible properties for role: {role}",
                )
        return data


@dataclass(frozen=True)
class PrunedRecord:
    """Immutable view of a record after visibility pruning.

    Holds only what may be serialized: the visible attributes and the
    populated relations whose names are visible. The source record is left
    untouched, so the data-access layer can keep using it.
    """

    record: RecordProtocol
    visible_properties: Tuple[str, ...]
    attributes: Mapping[str, Any]
    relations: Mapping[str, RelationValue]
