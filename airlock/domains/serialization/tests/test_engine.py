"""Unit tests for the SerializationEngine entry points."""

import pytest

from airlock.adapters.records.fake import FakeRecord
from airlock.domains.serialization.engine import SerializationEngine
from airlock.domains.serialization.options import EngineConfig, SerializationOptions
from airlock.domains.serialization.types import ABSENT


@pytest.mark.asyncio
async def test_serialize_without_options(engine, make_user):
    assert await engine.serialize(make_user(1, accessor={"user_id": 1})) == {
        "id": 1,
        "username": "user1",
        "email": "user1@example.com",
    }


@pytest.mark.asyncio
async def test_serialize_collection_uses_each_members_accessor(engine, make_user):
    users = [make_user(1, accessor={"user_id": 1}), make_user(2, accessor={"user_id": 1})]

    result = await engine.serialize_collection(users)

    assert result == [
        {"id": 1, "username": "user1", "email": "user1@example.com"},
        {"id": 2, "username": "user2"},
    ]


@pytest.mark.asyncio
async def test_serialize_collection_accessor_override(engine, make_user):
    users = [make_user(1, accessor={"user_id": 1}), make_user(2, accessor={"user_id": 1})]

    result = await engine.serialize_collection(
        users, SerializationOptions(accessor={"user_id": 2})
    )

    assert result == [
        {"id": 1, "username": "user1"},
        {"id": 2, "username": "user2", "email": "user2@example.com"},
    ]


@pytest.mark.asyncio
async def test_serialize_collection_drops_absent_members(engine, make_group):
    groups = [
        make_group(7, member_ids=(1,), accessor={"user_id": 1}),
        make_group(8, member_ids=(3,), accessor={"user_id": 1}),
        make_group(9, admin_ids=(1,), accessor={"user_id": 1}),
    ]

    result = await engine.serialize_collection(groups)

    assert result == [
        {"id": 7, "name": "group7"},
        {"id": 9, "name": "group9", "created_at": "2016-04-12T08:12:11Z"},
    ]


@pytest.mark.asyncio
async def test_serialize_collection_accepts_tuples(engine, make_user):
    result = await engine.serialize_collection((make_user(1), make_user(2)))

    assert [item["id"] for item in result] == [1, 2]


@pytest.mark.asyncio
async def test_serialize_returns_absent_sentinel(engine, make_group):
    result = await engine.serialize(make_group(8, member_ids=(3,), accessor={"user_id": 1}))

    assert result is ABSENT
    assert not result
    assert result is not None


def test_engine_builds_default_config(domain_registry):
    engine = SerializationEngine(domain_registry)

    assert isinstance(engine.config, EngineConfig)


@pytest.mark.asyncio
async def test_custom_designator_arguments(make_engine, make_user):
    seen = []

    def designator(accessor, identity):
        seen.append((accessor, identity))
        return "anyone"

    engine = make_engine(designator_arguments=lambda record: (record.accessor, record.identity))
    options = SerializationOptions(
        context_specific_visible_properties={"users": {"anyone": ["id"]}},
        context_designator=designator,
    )

    assert await engine.serialize(make_user(1, accessor={"user_id": 5}), options) == {"id": 1}
    assert seen == [({"user_id": 5}, 1)]


@pytest.mark.asyncio
async def test_engine_is_reusable_across_calls(engine):
    first = await engine.serialize(FakeRecord("comments", {"id": 1, "content": "a"}))
    second = await engine.serialize(FakeRecord("comments", {"id": 2, "content": "b"}))

    assert first == {"id": 1, "content": "a"}
    assert second == {"id": 2, "content": "b"}


@pytest.mark.asyncio
async def test_accessor_override_reaches_nested_records(make_engine, make_user, make_group):
    seen = []

    def designator(type_tag, accessor):
        seen.append((type_tag, accessor))
        return "anyone"

    author = make_user(2, relations={"groups": [make_group(7, member_ids=(2,))]})
    comment = FakeRecord("comments", {"id": 1}, {"author": author}, accessor={"user_id": 1})
    engine = make_engine(designator_arguments=lambda record: (record.type_tag, record.accessor))
    options = SerializationOptions(
        accessor={"user_id": 2},
        context_specific_visible_properties={
            "comments": {"anyone": ["id", "author"]},
            "users": {"anyone": ["id", "email", "groups"]},
            "groups": {"anyone": ["id", "name"]},
        },
        context_designator=designator,
    )

    result = await engine.serialize(comment, options)

    assert result == {
        "id": 1,
        "author": {"id": 2, "email": "user2@example.com", "groups": [{"id": 7, "name": "group7"}]},
    }
    assert sorted(seen) == [
        ("comments", {"user_id": 2}),
        ("groups", {"user_id": 2}),
        ("users", {"user_id": 2}),
    ]
    assert comment.accessor == {"user_id": 1}


@pytest.mark.asyncio
async def test_accessor_override_reaches_relation_handlers(make_engine, make_user, make_group):
    handled = []

    async def handle_ensure_relation(record, name):
        handled.append((record.type_tag, name, record.accessor))
        await record.load_relation(name)

    other = make_user(2, loadable={"groups": []}, accessor={"user_id": 9})
    users = [
        make_user(1, loadable={"groups": [make_group(7, member_ids=(1,))]}, accessor=None),
        other,
    ]
    engine = make_engine(handle_ensure_relation=handle_ensure_relation)
    options = SerializationOptions(
        accessor={"user_id": 1}, ensure_relations_loaded={"users": ["groups"]}
    )

    result = await engine.serialize_collection(users, options)

    assert result == [
        {
            "id": 1,
            "username": "user1",
            "email": "user1@example.com",
            "groups": [{"id": 7, "name": "group7"}],
        },
        {"id": 2, "username": "user2"},
    ]
    assert handled == [("users", "groups", {"user_id": 1})]
    assert other.accessor == {"user_id": 9}
