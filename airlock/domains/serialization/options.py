"""Per-call serialization options and engine-construction configuration.

Both are validated when they are built, so a malformed table fails where
it is written down instead of in the middle of a request.

Property tables (``context_specific_visible_properties`` and
``ensure_relations_loaded``) are keyed by type tag. Each entry is either a
list of property names, or a map from context label to such a list; the
map form needs a ``context_designator`` to pick the label:

    SerializationOptions(
        context_specific_visible_properties={
            "comments": {
                "requested": ["id", "author", "content", "parent", "children"],
                "parent": ["id", "author"],
            },
            "users": ["username"],
        },
        ensure_relations_loaded={"comments": {"requested": ["author", "parent"], "parent": []}},
        context_designator=lambda type_tag, chain, identity: "parent" if chain else "requested",
    )
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationInfo,
    field_validator,
    model_validator,
)

from airlock.core.config import AbsentRelationPolicy, settings
from airlock.core.exceptions import ConfigurationErrorReason, SerializationConfigurationError
from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.utils import is_name_list

PropertyTableEntry = Union[List[str], Dict[str, List[str]]]
PropertyTable = Dict[str, PropertyTableEntry]


def validate_property_table(table: Any, table_name: str) -> Optional[PropertyTable]:
    """Check the shape of a label-keyed property table and normalize it.

    Entries whose value is None are dropped, which lets callers switch a
    type off conditionally. Tuples are accepted wherever lists are.

    Raises:
        SerializationConfigurationError: NON_OBJECT_CONTEXT_TABLE when the
            table or one of its entries has the wrong shape,
            MALFORMED_CONTEXT_TABLE_ENTRY when a labelled entry is not a list.
    """
    if table is None:
        return None
    if not isinstance(table, Mapping):
        raise SerializationConfigurationError(
            ConfigurationErrorReason.NON_OBJECT_CONTEXT_TABLE,
            f"{table_name} must be a mapping keyed by type tag",
        )

    normalized: PropertyTable = {}
    for type_tag, entry in table.items():
        if entry is None:
            continue
        if is_name_list(entry):
            normalized[type_tag] = list(entry)
        elif isinstance(entry, Mapping):
            labelled: Dict[str, List[str]] = {}
            for label, names in entry.items():
                if not is_name_list(names):
                    raise SerializationConfigurationError(
                        ConfigurationErrorReason.MALFORMED_CONTEXT_TABLE_ENTRY,
                        f"{table_name}.{type_tag}.{label} must be a list of property names",
                    )
                labelled[label] = list(names)
            normalized[type_tag] = labelled
        else:
            raise SerializationConfigurationError(
                ConfigurationErrorReason.NON_OBJECT_CONTEXT_TABLE,
                f"{table_name}.{type_tag} must be a list, or a mapping whose keys are "
                "labels returned by the context designator and whose values are lists.",
            )
    return normalized


class SerializationOptions(BaseModel):
    """Options for one serialization call.

    ``accessor`` is only applied when passed explicitly (even as None); it
    then replaces the root record's accessor for the whole traversal.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    context_specific_visible_properties: Optional[PropertyTable] = None
    ensure_relations_loaded: Optional[PropertyTable] = None
    context_designator: Optional[Callable[..., Any]] = None
    accessor: Any = None

    @field_validator(
        "context_specific_visible_properties", "ensure_relations_loaded", mode="before"
    )
    @classmethod
    def validate_tables(cls, value: Any, info: ValidationInfo) -> Any:
        """Validate table shapes before type coercion."""
        return validate_property_table(value, info.field_name)

    @model_validator(mode="after")
    def require_designator_for_labelled_entries(self) -> "SerializationOptions":
        """Labelled entries are unusable without a designator."""
        if self.context_designator is not None:
            return self
        for table_name in ("context_specific_visible_properties", "ensure_relations_loaded"):
            table = getattr(self, table_name) or {}
            for type_tag, entry in table.items():
                if isinstance(entry, dict):
                    raise SerializationConfigurationError(
                        ConfigurationErrorReason.MISSING_CONTEXT_DESIGNATOR,
                        f"options must contain a context_designator function if "
                        f"{table_name}.{type_tag} is a mapping",
                    )
        return self

    @property
    def overrides_accessor(self) -> bool:
        """Whether ``accessor`` was passed explicitly."""
        return "accessor" in self.model_fields_set

    def context_entry(self, type_tag: str) -> Optional[PropertyTableEntry]:
        """Context visibility entry for a type, if any."""
        return (self.context_specific_visible_properties or {}).get(type_tag)

    def ensure_entry(self, type_tag: str) -> Optional[PropertyTableEntry]:
        """Ensure-relations entry for a type, if any."""
        return (self.ensure_relations_loaded or {}).get(type_tag)


DesignatorArgumentsBuilder = Callable[[RecordProtocol], Sequence[Any]]
EnsureRelationHandler = Callable[[RecordProtocol, str], Any]


class EngineConfig(BaseModel):
    """Engine-construction configuration.

    Toggles default to the process settings so deployments can flip them
    through AIRLOCK_* env vars.

    ``handle_ensure_relation`` replaces the per-name relation loading; it is
    called as ``handler(record, relation_name)`` and may be async. Its
    return value is ignored. ``force_load_invisible_relations`` is
    independent of it: the toggle decides which names reach the handler,
    whichever handler is in use.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    designator_arguments: Optional[DesignatorArgumentsBuilder] = None
    handle_ensure_relation: Optional[EnsureRelationHandler] = None
    force_load_invisible_relations: StrictBool = Field(
        default_factory=lambda: settings.FORCE_LOAD_INVISIBLE_RELATIONS
    )
    skip_unsaved_records: StrictBool = Field(default_factory=lambda: settings.SKIP_UNSAVED_RECORDS)
    absent_relation_policy: AbsentRelationPolicy = Field(
        default_factory=lambda: settings.ABSENT_RELATION_POLICY
    )
    emit_diagnostics: StrictBool = Field(default_factory=lambda: not settings.is_production)
