"""Tests for the in-memory store and repairer directory."""

import pytest

from repairbot.schemas.conversation_schema import ConversationSession, Message, SenderType
from repairbot.schemas.memory_schema import ConversationMemory, RepairerRef
from repairbot.tools.repairers import InMemoryRepairerDirectory
from tests.conftest import PARIS


def _session(cid: str = "c-1") -> ConversationSession:
    return ConversationSession(conversation_id=cid, session_id="s-1")


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        await store.create_session(_session())
        assert (await store.get_session("c-1")).session_id == "s-1"
        assert await store.get_session("missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_session_rejected(self, store):
        await store.create_session(_session())
        with pytest.raises(ValueError):
            await store.create_session(_session())

    @pytest.mark.asyncio
    async def test_update_missing_session(self, store):
        with pytest.raises(KeyError):
            await store.update_session(_session("missing"))

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store):
        await store.create_session(_session())
        session = await store.get_session("c-1")
        session.session_id = "changed"
        assert (await store.get_session("c-1")).session_id == "s-1"

    @pytest.mark.asyncio
    async def test_list_messages_limit(self, store):
        for i in range(5):
            await store.append_message("c-1", Message(sender_type=SenderType.USER, content=f"m{i}"))
        assert [m.content for m in await store.list_messages("c-1", limit=2)] == ["m3", "m4"]
        assert await store.list_messages("c-1", limit=0) == []
        assert len(await store.list_messages("c-1")) == 5

    @pytest.mark.asyncio
    async def test_memory_roundtrip_is_isolated(self, store):
        memory = ConversationMemory()
        await store.save_memory("c-1", memory)
        memory.conversation_context.collected_symptoms.append("later")
        loaded = await store.load_memory("c-1")
        assert loaded.conversation_context.collected_symptoms == []
        assert await store.load_memory("missing") is None

    @pytest.mark.asyncio
    async def test_metrics_and_reset(self, store):
        await store.increment_metric("hits")
        await store.increment_metric("hits")
        assert store.metrics["hits"] == 2
        store.reset()
        assert store.metrics == {}


class TestRepairerDirectory:
    @pytest.mark.asyncio
    async def test_sorted_by_distance(self, directory):
        found = await directory.find_nearby(PARIS, 5)
        distances = [r.distance_km for r in found]
        assert distances == sorted(distances)
        assert found[0].name == "Atelier Mobile Bastille"

    @pytest.mark.asyncio
    async def test_skips_repairers_without_coordinates(self, directory):
        found = await directory.find_nearby(PARIS, 10)
        assert all(r.lat is not None for r in found)
        assert len(found) == 3

    @pytest.mark.asyncio
    async def test_limit(self, directory):
        assert len(await directory.find_nearby(PARIS, 1)) == 1
        assert await directory.find_nearby(PARIS, 0) == []

    @pytest.mark.asyncio
    async def test_custom_directory(self):
        directory = InMemoryRepairerDirectory([
            RepairerRef(name="Far", address="A", lat=43.3, lng=5.37),
            RepairerRef(name="Near", address="B", lat=48.86, lng=2.35),
        ])
        found = await directory.find_nearby(PARIS, 5)
        assert [r.name for r in found] == ["Near", "Far"]
