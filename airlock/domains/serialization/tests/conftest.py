"""Serialization domain test fixtures.

A small users / groups / comments domain:

- a user sees everything about themself and only id + username of others;
- a group reveals itself to admins and members, and is ABSENT to outsiders;
- comments are visible to anyone.
"""

import asyncio

import pytest

from airlock.adapters.records.fake import FakeRecord
from airlock.domains.serialization.engine import SerializationEngine
from airlock.domains.serialization.types import RecordTypeCapabilities

USER_ROLES = {
    "self": ["id", "username", "email", "groups"],
    "other": ["id", "username"],
}
GROUP_ROLES = {
    "admin": ["id", "name", "members", "created_at"],
    "member": ["id", "name", "members"],
    "outsider": [],
}
COMMENT_ROLES = {"anyone": ["id", "author", "content", "parent", "children"]}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def user_role(record, accessor):
    if accessor and accessor.get("user_id") == record.identity:
        return "self"
    return "other"


async def group_role(record, accessor):
    await asyncio.sleep(0)
    user_id = (accessor or {}).get("user_id")
    attributes = record.attributes()
    if user_id in attributes.get("admin_ids", ()):
        return "admin"
    if user_id in attributes.get("member_ids", ()):
        return "member"
    return "outsider"


def anyone_role(record, accessor):
    return "anyone"


def _make_capabilities(type_tag: str, roles: dict, role_determiner=anyone_role):
    """Build a RecordTypeCapabilities entry for tests."""
    return RecordTypeCapabilities(
        type_tag=type_tag,
        role_determiner=role_determiner,
        roles_to_visible_properties=roles,
    )


def _make_user(user_id: int = 1, **kwargs) -> FakeRecord:
    return FakeRecord(
        "users",
        {
            "id": user_id,
            "username": f"user{user_id}",
            "email": f"user{user_id}@example.com",
            "hashed_password": "x",
        },
        **kwargs,
    )


def _make_group(group_id: int = 7, member_ids=(1,), admin_ids=(), **kwargs) -> FakeRecord:
    return FakeRecord(
        "groups",
        {
            "id": group_id,
            "name": f"group{group_id}",
            "created_at": "2016-04-12T08:12:11Z",
            "member_ids": list(member_ids),
            "admin_ids": list(admin_ids),
        },
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_capabilities():
    return _make_capabilities


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def make_group():
    return _make_group


@pytest.fixture
def domain_registry(capability_registry):
    capability_registry.build(
        [
            _make_capabilities("users", USER_ROLES, user_role),
            _make_capabilities("groups", GROUP_ROLES, group_role),
            _make_capabilities("comments", COMMENT_ROLES),
        ]
    )
    return capability_registry


@pytest.fixture
def make_engine(domain_registry, engine_config):
    """Factory for engines over the test domain with config overrides."""

    def _make(**overrides) -> SerializationEngine:
        return SerializationEngine(domain_registry, engine_config.model_copy(update=overrides))

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()
