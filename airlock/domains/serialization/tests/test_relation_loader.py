"""Unit tests for RelationLoader and the default ensure-relation handler."""

import asyncio
import logging
from dataclasses import dataclass, field

import pytest

from airlock.adapters.records.fake import FakeRecord
from airlock.domains.serialization.relation_loader import (
    RelationLoader,
    default_handle_ensure_relation,
)


def _user(**kwargs) -> FakeRecord:
    return FakeRecord(
        "users",
        {"id": 1, "username": "elephant1"},
        loadable={
            "groups": [FakeRecord("groups", {"id": 7})],
            "profile": FakeRecord("profiles", {"id": 3}),
        },
        **kwargs,
    )


# ===========================================================================
# select()
# ===========================================================================


@dataclass
class SelectCase:
    desc: str
    requested: list
    visible: list = field(default_factory=lambda: ["id", "username", "groups"])
    force: bool = False
    expect: list = field(default_factory=list)


SELECT_CASES = [
    SelectCase(desc="visible names selected", requested=["groups"], expect=["groups"]),
    SelectCase(desc="invisible names dropped", requested=["groups", "profile"], expect=["groups"]),
    SelectCase(desc="nothing visible", requested=["profile"], expect=[]),
    SelectCase(
        desc="force keeps invisible names",
        requested=["groups", "profile"],
        force=True,
        expect=["groups", "profile"],
    ),
    SelectCase(desc="duplicates collapsed", requested=["groups", "groups"], expect=["groups"]),
    SelectCase(desc="nothing requested", requested=[], expect=[]),
]


@pytest.mark.parametrize("case", SELECT_CASES, ids=lambda c: c.desc)
def test_select(case: SelectCase):
    loader = RelationLoader(force_load_invisible_relations=case.force)
    assert loader.select(_user(), case.requested, case.visible) == case.expect


def test_select_logs_invisible_requests(caplog):
    loader = RelationLoader(emit_diagnostics=True)
    record = _user(relation_chain=("author",))

    with caplog.at_level(logging.WARNING, logger="airlock"):
        loader.select(record, ["groups", "profile"], ["id", "groups"])

    assert len(caplog.records) == 1
    log_record = caplog.records[0]
    message = log_record.getMessage()
    assert "Requested relations which are not visible properties: profile" in message
    assert "will not be loaded" in message
    assert log_record.dimensions["type_tag"] == "users"
    assert log_record.dimensions["relation_chain"] == "author"


def test_select_logs_forced_loads(caplog):
    loader = RelationLoader(force_load_invisible_relations=True, emit_diagnostics=True)

    with caplog.at_level(logging.WARNING, logger="airlock"):
        loader.select(_user(), ["profile"], ["id"])

    assert "will nevertheless be loaded" in caplog.text


def test_select_silent_without_diagnostics(caplog):
    loader = RelationLoader(emit_diagnostics=False)

    with caplog.at_level(logging.WARNING, logger="airlock"):
        loader.select(_user(), ["profile"], ["id"])

    assert caplog.records == []


def test_select_silent_when_everything_visible(caplog):
    loader = RelationLoader(emit_diagnostics=True)

    with caplog.at_level(logging.WARNING, logger="airlock"):
        loader.select(_user(), ["groups"], ["groups"])

    assert caplog.records == []


# ===========================================================================
# default_handle_ensure_relation
# ===========================================================================


@pytest.mark.asyncio
async def test_default_handler_loads_missing_relation():
    record = _user()

    related = await default_handle_ensure_relation(record, "groups")

    assert record.loads == ["groups"]
    assert [member.identity for member in related] == [7]


@pytest.mark.asyncio
async def test_default_handler_skips_populated_relation():
    record = FakeRecord("users", {"id": 1}, relations={"groups": []})

    await default_handle_ensure_relation(record, "groups")

    assert record.loads == []


# ===========================================================================
# ensure()
# ===========================================================================


@pytest.mark.asyncio
async def test_ensure_loads_only_visible_relations():
    record = _user()

    names = await RelationLoader().ensure(record, ["groups", "profile"], ["id", "groups"])

    assert names == ["groups"]
    assert record.loads == ["groups"]
    assert record.is_relation_loaded("groups")
    assert not record.is_relation_loaded("profile")


@pytest.mark.asyncio
async def test_ensure_force_loads_invisible_relations():
    record = _user()

    await RelationLoader(force_load_invisible_relations=True).ensure(
        record, ["groups", "profile"], ["id"]
    )

    assert sorted(record.loads) == ["groups", "profile"]


@pytest.mark.asyncio
async def test_ensure_uses_custom_sync_handler():
    calls = []

    def handler(record, name):
        calls.append(name)
        record.set_attribute("group_count", 2)

    record = _user()
    await RelationLoader(handle_ensure_relation=handler).ensure(record, ["groups"], ["groups"])

    assert calls == ["groups"]
    assert record.loads == []
    assert record.attributes()["group_count"] == 2


@pytest.mark.asyncio
async def test_ensure_runs_handlers_concurrently():
    started = []
    gate = asyncio.Event()

    async def handler(record, name):
        started.append(name)
        if len(started) == 2:
            gate.set()
        await gate.wait()

    loader = RelationLoader(handle_ensure_relation=handler)
    await asyncio.wait_for(
        loader.ensure(_user(), ["groups", "profile"], ["groups", "profile"]), timeout=1
    )

    assert sorted(started) == ["groups", "profile"]


@pytest.mark.asyncio
async def test_ensure_propagates_load_errors():
    record = _user(load_error=ConnectionError("database unavailable"))

    with pytest.raises(ConnectionError, match="database unavailable"):
        await RelationLoader().ensure(record, ["groups"], ["groups"])
