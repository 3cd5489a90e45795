"""
Test 7: Store-backed sessions (sessions/storage.py, sessions/memory.py)

Tests StoreSessionStorage with MemorySessionFactory and with a mocked
SessionStorageFactory.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from tessera.sessions import (
    MemorySessionFactory,
    Session,
    SessionStorageFactory,
    StoreSessionStorage,
    generate_session_id,
)

from tests.conftest import cookie_pair


PAST = datetime(2000, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# MemorySessionFactory
# ============================================================================

class TestMemorySessionFactory:

    def test_abstract_contract(self):
        with pytest.raises(TypeError):
            SessionStorageFactory()

    def test_session_id_format(self):
        ids = {generate_session_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(sid.startswith("sess_") for sid in ids)

    @pytest.mark.asyncio
    async def test_create_read(self, memory_factory):
        sid = await memory_factory.create_data({"values": {"n": 1}, "flash": {}})
        assert sid.startswith("sess_")
        assert await memory_factory.read_data(sid) == {"values": {"n": 1}, "flash": {}}

    @pytest.mark.asyncio
    async def test_read_unknown(self, memory_factory):
        assert await memory_factory.read_data("sess_unknown") is None

    @pytest.mark.asyncio
    async def test_data_is_copied(self, memory_factory):
        data = {"values": {"items": [1]}, "flash": {}}
        sid = await memory_factory.create_data(data)
        data["values"]["items"].append(2)

        loaded = await memory_factory.read_data(sid)
        assert loaded["values"]["items"] == [1]
        loaded["values"]["items"].append(3)
        assert (await memory_factory.read_data(sid))["values"]["items"] == [1]

    @pytest.mark.asyncio
    async def test_update(self, memory_factory):
        sid = await memory_factory.create_data({"values": {}, "flash": {}})
        await memory_factory.update_data(sid, {"values": {"n": 2}, "flash": {}})
        assert (await memory_factory.read_data(sid))["values"] == {"n": 2}

    @pytest.mark.asyncio
    async def test_update_unknown_recreates(self, memory_factory):
        await memory_factory.update_data("sess_gone", {"values": {"n": 1}, "flash": {}})
        assert await memory_factory.read_data("sess_gone") is not None

    @pytest.mark.asyncio
    async def test_delete_idempotent(self, memory_factory):
        sid = await memory_factory.create_data({})
        await memory_factory.delete_data(sid)
        await memory_factory.delete_data(sid)
        assert await memory_factory.read_data(sid) is None
        assert len(memory_factory) == 0

    @pytest.mark.asyncio
    async def test_expired_reads_as_none(self, memory_factory):
        sid = await memory_factory.create_data({"values": {}, "flash": {}}, expires=PAST)
        assert await memory_factory.read_data(sid) is None
        assert len(memory_factory) == 0

    @pytest.mark.asyncio
    async def test_future_expiry_readable(self, memory_factory):
        expires = datetime.now(timezone.utc) + timedelta(hours=1)
        sid = await memory_factory.create_data({"values": {}, "flash": {}}, expires=expires)
        assert await memory_factory.read_data(sid) is not None

    @pytest.mark.asyncio
    async def test_naive_expiry_is_utc(self, memory_factory):
        sid = await memory_factory.create_data({}, expires=datetime(2000, 1, 1))
        assert await memory_factory.read_data(sid) is None


# ============================================================================
# StoreSessionStorage + MemorySessionFactory
# ============================================================================

class TestStoreSessionStorage:

    @pytest.mark.asyncio
    async def test_new_session_has_no_id(self, store_storage):
        session = await store_storage.get_session(None)
        assert session.id == ""

    @pytest.mark.asyncio
    async def test_commit_creates_row_and_sets_id_cookie(self, store_storage, memory_factory):
        session = await store_storage.get_session(None)
        session.set("user", "alice")
        header = await store_storage.commit_session(session)

        sid = await store_storage.cookie.parse(cookie_pair(header))
        assert sid.startswith("sess_")
        assert len(memory_factory) == 1
        assert await memory_factory.read_data(sid) == {"values": {"user": "alice"}, "flash": {}}

    @pytest.mark.asyncio
    async def test_end_to_end(self, store_storage, memory_factory):
        session = await store_storage.get_session(None)
        session.set("user", "alice")
        header = await store_storage.commit_session(session)

        restored = await store_storage.get_session(cookie_pair(header))
        assert restored.id.startswith("sess_")
        assert restored.get("user") == "alice"

        restored.set("visits", 2)
        second = await store_storage.commit_session(restored)
        assert len(memory_factory) == 1
        assert await store_storage.cookie.parse(cookie_pair(second)) == restored.id

        again = await store_storage.get_session(cookie_pair(second))
        assert again.get("visits") == 2

    @pytest.mark.asyncio
    async def test_commit_assigns_id_to_session(self, store_storage, memory_factory):
        session = await store_storage.get_session(None)
        session.set("user", "alice")
        header = await store_storage.commit_session(session)

        assert session.id == await store_storage.cookie.parse(cookie_pair(header))

        session.set("visits", 1)
        second = await store_storage.commit_session(session)

        assert len(memory_factory) == 1
        assert await store_storage.cookie.parse(cookie_pair(second)) == session.id
        assert await memory_factory.read_data(session.id) == {
            "values": {"user": "alice", "visits": 1},
            "flash": {},
        }

    @pytest.mark.asyncio
    async def test_flash_consumed_across_requests(self, store_storage):
        session = await store_storage.get_session(None)
        session.flash("notice", "Welcome")
        header = await store_storage.commit_session(session)

        first = await store_storage.get_session(cookie_pair(header))
        assert first.get("notice") == "Welcome"
        await store_storage.commit_session(first)

        second = await store_storage.get_session(cookie_pair(header))
        assert not second.has("notice")

    @pytest.mark.asyncio
    async def test_unknown_id_gives_fresh_session(self, store_storage):
        header = await store_storage.cookie.serialize("sess_does_not_exist")
        session = await store_storage.get_session(cookie_pair(header))
        assert session.id == ""
        assert session.data == {"values": {}, "flash": {}}

    @pytest.mark.asyncio
    async def test_forged_id_ignored(self, store_storage, memory_factory):
        sid = await memory_factory.create_data({"values": {"admin": True}, "flash": {}})
        unsigned = StoreSessionStorage(memory_factory)
        header = await unsigned.cookie.serialize(sid)

        session = await store_storage.get_session(cookie_pair(header))
        assert session.id == ""
        assert not session.has("admin")

    @pytest.mark.asyncio
    async def test_non_string_id_ignored(self, store_storage):
        header = await store_storage.cookie.serialize({"id": "sess_x"})
        session = await store_storage.get_session(cookie_pair(header))
        assert session.id == ""

    @pytest.mark.asyncio
    async def test_destroy_deletes_row(self, store_storage, memory_factory):
        session = await store_storage.get_session(None)
        session.set("user", "alice")
        header = await store_storage.commit_session(session)
        restored = await store_storage.get_session(cookie_pair(header))

        cleared = await store_storage.destroy_session(restored)
        assert len(memory_factory) == 0
        assert "Expires=Thu, 01 Jan 1970 00:00:00 GMT" in cleared

        after = await store_storage.get_session(cookie_pair(header))
        assert after.id == ""

    @pytest.mark.asyncio
    async def test_expired_row_gives_fresh_session(self, store_storage):
        session = await store_storage.get_session(None)
        session.set("user", "alice")
        header = await store_storage.commit_session(session, expires=PAST)

        restored = await store_storage.get_session(cookie_pair(header))
        assert restored.id == ""
        assert not restored.has("user")


# ============================================================================
# StoreSessionStorage + mocked factory
# ============================================================================

class TestStoreSessionStorageContract:

    @pytest.fixture
    def factory(self):
        return AsyncMock(spec=SessionStorageFactory)

    @pytest.mark.asyncio
    async def test_commit_existing_updates(self, factory):
        storage = StoreSessionStorage(factory)
        session = Session({"a": 1}, id="sess_1")

        header = await storage.commit_session(session)

        factory.update_data.assert_awaited_once_with(
            "sess_1", {"values": {"a": 1}, "flash": {}}, None
        )
        factory.create_data.assert_not_awaited()
        assert await storage.cookie.parse(cookie_pair(header)) == "sess_1"

    @pytest.mark.asyncio
    async def test_commit_new_creates_with_cookie_expiry(self, factory):
        factory.create_data.return_value = "sess_new"
        storage = StoreSessionStorage(factory, max_age=60)

        before = datetime.now(timezone.utc)
        header = await storage.commit_session(Session({"a": 1}))
        after = datetime.now(timezone.utc)

        data, expires = factory.create_data.await_args.args
        assert data == {"values": {"a": 1}, "flash": {}}
        assert before + timedelta(seconds=60) <= expires <= after + timedelta(seconds=60)
        assert await storage.cookie.parse(cookie_pair(header)) == "sess_new"

    @pytest.mark.asyncio
    async def test_commit_expires_override(self, factory):
        factory.create_data.return_value = "sess_new"
        storage = StoreSessionStorage(factory, max_age=60)
        when = datetime(2031, 1, 1, tzinfo=timezone.utc)

        await storage.commit_session(Session(), expires=when, max_age=None)

        assert factory.create_data.await_args.args[1] == when

    @pytest.mark.asyncio
    async def test_second_commit_updates_created_row(self, factory):
        factory.create_data.return_value = "sess_new"
        storage = StoreSessionStorage(factory)
        session = Session({"a": 1})

        await storage.commit_session(session)
        await storage.commit_session(session)

        factory.create_data.assert_awaited_once()
        factory.update_data.assert_awaited_once_with(
            "sess_new", {"values": {"a": 1}, "flash": {}}, None
        )

    @pytest.mark.asyncio
    async def test_get_session_reads_by_id(self, factory):
        factory.read_data.return_value = {"values": {"user": "bob"}, "flash": {}}
        storage = StoreSessionStorage(factory)
        header = await storage.cookie.serialize("sess_1")

        session = await storage.get_session(cookie_pair(header))

        factory.read_data.assert_awaited_once_with("sess_1")
        assert session.id == "sess_1"
        assert session.get("user") == "bob"

    @pytest.mark.asyncio
    async def test_get_session_without_cookie_skips_store(self, factory):
        storage = StoreSessionStorage(factory)
        await storage.get_session(None)
        factory.read_data.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_destroy_without_id_skips_store(self, factory):
        storage = StoreSessionStorage(factory)
        await storage.destroy_session(Session())
        factory.delete_data.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_destroy_with_id_deletes(self, factory):
        storage = StoreSessionStorage(factory)
        await storage.destroy_session(Session(id="sess_1"))
        factory.delete_data.assert_awaited_once_with("sess_1")

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, factory):
        factory.read_data.side_effect = ConnectionError("store down")
        storage = StoreSessionStorage(factory)
        header = await storage.cookie.serialize("sess_1")

        with pytest.raises(ConnectionError):
            await storage.get_session(cookie_pair(header))
