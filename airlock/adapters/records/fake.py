"""Fake record for testing.

Holds attributes and relations in dicts and records every load so tests can
assert which relations were fetched.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

_UNSET = object()

FakeRelation = Union["FakeRecord", Sequence["FakeRecord"], None]


class FakeRecord:
    """Test implementation of RecordProtocol.

    ``relations`` are populated up front; ``loadable`` relations only
    become populated once ``load_relation`` is awaited. ``identity``
    defaults to the ``id`` attribute.

    Usage:
        group = FakeRecord("groups", {"id": 7, "name": "Gauchos"})
        user = FakeRecord(
            "users",
            {"id": 1, "username": "elephant1"},
            loadable={"groups": [group]},
            accessor={"user_id": 1},
        )
        await engine.serialize(user, options)

        assert user.loads == ["groups"]
        assert user.related("groups")[0].relation_chain == ("groups",)
    """

    def __init__(
        self,
        type_tag: str,
        attributes: Optional[Mapping[str, Any]] = None,
        relations: Optional[Mapping[str, FakeRelation]] = None,
        *,
        loadable: Optional[Mapping[str, FakeRelation]] = None,
        accessor: Any = None,
        relation_chain: Sequence[str] = (),
        identity: Any = _UNSET,
        persisted: bool = True,
        load_error: Optional[Exception] = None,
    ) -> None:
        """Initialize the fake record."""
        self._type_tag = type_tag
        self._attributes: Dict[str, Any] = dict(attributes or {})
        self._relations: Dict[str, FakeRelation] = dict(relations or {})
        self._loadable: Dict[str, FakeRelation] = dict(loadable or {})
        self._identity = identity
        self._persisted = persisted
        self._load_error = load_error
        self.accessor = accessor
        self.relation_chain: Tuple[str, ...] = tuple(relation_chain)
        self.loads: List[str] = []  # ordered log of all load_relation calls

    @property
    def type_tag(self) -> str:
        return self._type_tag

    @property
    def identity(self) -> Any:
        if self._identity is _UNSET:
            return self._attributes.get("id")
        return self._identity

    @property
    def is_persisted(self) -> bool:
        return self._persisted

    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def relation_names(self) -> List[str]:
        return list(self._relations)

    def is_relation_loaded(self, name: str) -> bool:
        return name in self._relations

    def related(self, name: str) -> FakeRelation:
        """Return the relation as views stamped with this record's accessor and chain.

        Views share state with the stored records, so the same record can be
        reached along several paths without the paths interfering.
        """
        value = self._relations[name]
        chain = self.relation_chain + (name,)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return [member._view(self.accessor, chain) for member in value]
        return value._view(self.accessor, chain)

    async def load_relation(self, name: str) -> None:
        """Populate ``name`` from ``loadable``; unknown names load as None."""
        self.loads.append(name)
        if self._load_error is not None:
            raise self._load_error
        self._relations[name] = self._loadable.get(name)

    def with_accessor(self, accessor: Any) -> "FakeRecord":
        return self._view(accessor, self.relation_chain)

    def _view(self, accessor: Any, relation_chain: Tuple[str, ...]) -> "FakeRecord":
        view = object.__new__(FakeRecord)
        view.__dict__.update(self.__dict__)
        view.accessor = accessor
        view.relation_chain = relation_chain
        return view

    # Test helpers

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute, e.g. from a custom relation handler."""
        self._attributes[name] = value

    @property
    def load_count(self) -> int:
        """Total number of load_relation calls."""
        return len(self.loads)
