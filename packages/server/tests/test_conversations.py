"""
Integration tests for conversations and items.

Tests cover:
- Conversation CRUD scoped to the owning user
- Item ordering and partial updates
- Automatic retitling from the first user message
- updated_at tracking item activity
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from app.models.base import as_utc, utcnow
from app.models.conversation import Conversation
from app.models.item import Item
from app.services.conversations import item_text, searchable_text, title_from_text
from conftest import add_user, bearer


def _ts(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


async def _create(client, user, **body):
    resp = await client.post("/api/conversations", json=body, headers=bearer(user))
    assert resp.status_code == 201
    return resp.json()


async def _add(client, user, conversation_id, **item):
    return await client.post(
        f"/api/conversations/{conversation_id}/items",
        json={"item": item},
        headers=bearer(user),
    )


# ---------------------------------------------------------------------------
# Unit Tests: helpers
# ---------------------------------------------------------------------------

class TestTitleHelpers:
    def test_item_text_from_string_and_dict(self):
        assert item_text("hello") == "hello"
        assert item_text({"text": "hi there"}) == "hi there"
        assert item_text({"args": {"path": "/"}}) == ""
        assert item_text(None) == ""

    def test_short_title_kept(self):
        assert title_from_text("  Fix the login bug  ") == "Fix the login bug"

    def test_long_title_truncated(self):
        text = "a" * 60
        assert title_from_text(text) == "a" * 50 + "..."

    def test_exactly_fifty_chars(self):
        assert title_from_text("b" * 50) == "b" * 50


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------

class TestConversationCrud:
    async def test_create_defaults(self, client, world):
        data = await _create(client, world.users["member"])
        assert data["title"] == "New Chat"
        assert data["items"] == []

    async def test_create_with_client_id(self, client, world):
        conv_id = str(uuid.uuid4())
        data = await _create(client, world.users["member"], id=conv_id, title="Planned")
        assert data["id"] == conv_id

        resp = await client.post(
            "/api/conversations",
            json={"id": conv_id},
            headers=bearer(world.users["member"]),
        )
        assert resp.status_code == 409

    async def test_list_only_own(self, client, world):
        resp = await client.get("/api/conversations", headers=bearer(world.users["admin"]))
        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()] == [str(world.conversations["admin"].id)]
        assert resp.json()[0]["items"][0]["content"] == {"text": "shared keyword from admin"}

    async def test_other_users_conversation_not_found(self, client, world):
        other = world.conversations["owner"].id
        headers = bearer(world.users["member"])

        assert (await client.get(f"/api/conversations/{other}", headers=headers)).status_code == 404
        resp = await client.patch(
            f"/api/conversations/{other}", json={"title": "mine now"}, headers=headers
        )
        assert resp.status_code == 404
        assert (await client.delete(f"/api/conversations/{other}", headers=headers)).status_code == 404

    async def test_rename(self, client, world):
        conv = world.conversations["member"]
        resp = await client.patch(
            f"/api/conversations/{conv.id}",
            json={"title": "Renamed"},
            headers=bearer(world.users["member"]),
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Renamed"

    async def test_delete(self, client, world):
        conv = world.conversations["member"]
        headers = bearer(world.users["member"])
        resp = await client.delete(f"/api/conversations/{conv.id}", headers=headers)
        assert resp.status_code == 204
        resp = await client.get(f"/api/conversations/{conv.id}", headers=headers)
        assert resp.status_code == 404

    async def test_most_recently_updated_first(self, client, world):
        user = world.users["member"]
        fresh = await _create(client, user, title="Fresh")
        resp = await client.get("/api/conversations", headers=bearer(user))
        assert resp.json()[0]["id"] == fresh["id"]


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

class TestItems:
    async def test_items_keep_insertion_order(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user, title="Ordered")
        for text in ("first", "second", "third"):
            resp = await _add(client, user, conv["id"], type="message", role="user", content=text)
            assert resp.status_code == 201

        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        assert [i["content"] for i in resp.json()["items"]] == ["first", "second", "third"]

    async def test_first_user_message_sets_title(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        await _add(client, user, conv["id"], type="system", content="setup")
        await _add(client, user, conv["id"], type="message", role="assistant", content="Hi!")
        await _add(
            client, user, conv["id"], type="message", role="user",
            content={"text": "How do I rotate my API keys?"},
        )
        await _add(client, user, conv["id"], type="message", role="user", content="follow-up")

        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        assert resp.json()["title"] == "How do I rotate my API keys?"

    async def test_explicit_title_not_overwritten(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user, title="Chosen")
        await _add(client, user, conv["id"], type="message", role="user", content="anything")
        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        assert resp.json()["title"] == "Chosen"

    async def test_updated_at_not_older_than_items(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        created = await _add(client, user, conv["id"], type="tool_call", content={"name": "ls"})
        item = created.json()

        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        data = resp.json()
        assert _ts(data["updated_at"]) >= _ts(item["created_at"])
        assert _ts(data["updated_at"]) >= _ts(conv["updated_at"])

    async def test_duplicate_item_id(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        item_id = str(uuid.uuid4())
        resp = await _add(client, user, conv["id"], id=item_id, type="message", role="user", content="a")
        assert resp.status_code == 201
        resp = await _add(client, user, conv["id"], id=item_id, type="message", role="user", content="b")
        assert resp.status_code == 409

    async def test_add_to_other_users_conversation(self, client, world):
        resp = await _add(
            client, world.users["member"], world.conversations["owner"].id,
            type="message", role="user", content="sneaky",
        )
        assert resp.status_code == 404

    async def test_unknown_item_type_rejected(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        resp = await _add(client, user, conv["id"], type="telepathy", content="x")
        assert resp.status_code == 422

    async def test_partial_update(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        created = await _add(
            client, user, conv["id"], type="tool_call", content={"name": "grep"}, status="in_progress"
        )
        item_id = created.json()["id"]

        resp = await client.patch(
            f"/api/items/{item_id}", json={"status": "completed"}, headers=bearer(user)
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"
        assert resp.json()["content"] == {"name": "grep"}

        resp = await client.patch(
            f"/api/items/{item_id}", json={"content": {"name": "rg"}}, headers=bearer(user)
        )
        assert resp.json()["content"] == {"name": "rg"}
        assert resp.json()["status"] == "completed"

    async def test_update_other_users_item(self, client, world):
        owner = world.users["owner"]
        conv = await _create(client, owner)
        created = await _add(client, owner, conv["id"], type="message", role="user", content="private")

        resp = await client.patch(
            f"/api/items/{created.json()['id']}",
            json={"content": "edited"},
            headers=bearer(world.users["admin"]),
        )
        assert resp.status_code == 404

    async def test_whitespace_first_message_keeps_default_title(self, client, world):
        user = world.users["member"]
        conv = await _create(client, user)
        await _add(client, user, conv["id"], type="message", role="user", content="   ")
        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        assert resp.json()["title"] == "New Chat"

        await _add(client, user, conv["id"], type="message", role="user", content="Real question")
        resp = await client.get(f"/api/conversations/{conv['id']}", headers=bearer(user))
        assert resp.json()["title"] == "Real question"


class TestSearchableText:
    def test_message_text(self):
        assert searchable_text("plain") == "plain"
        assert searchable_text({"text": "hello", "extra": "x"}) == "hello"

    def test_structured_content_keeps_values_only(self):
        content = {"name": "lookup", "arguments": {"city": "Oslo", "days": 3, "strict": True}}
        assert searchable_text(content) == "lookup Oslo 3"

    def test_lists_are_flattened(self):
        assert searchable_text({"output": ["a.txt", {"path": "b.txt"}]}) == "a.txt b.txt"

    def test_nothing_to_search(self):
        assert searchable_text(None) is None
        assert searchable_text({}) is None

    async def test_stored_on_insert_and_update(self, client, world, session_factory):
        user = world.users["member"]
        conv = await _create(client, user)
        created = await _add(
            client, user, conv["id"], type="tool_call",
            content={"name": "lookup", "arguments": {"city": "Oslo"}},
        )
        item_id = created.json()["id"]
        await client.patch(
            f"/api/items/{item_id}",
            json={"content": {"name": "lookup", "arguments": {"city": "Bergen"}}},
            headers=bearer(user),
        )

        async with session_factory() as s:
            item = await s.get(Item, uuid.UUID(item_id))
            assert item.search_text == "lookup Bergen"


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

class TestTimestamps:
    def test_utcnow_is_timezone_aware(self):
        now = utcnow()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_as_utc(self):
        naive = datetime(2026, 1, 2, 3, 4, 5)
        assert as_utc(naive) == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        aware = datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert as_utc(aware) is aware
        assert as_utc(None) is None

    async def test_rows_with_aware_timestamps_round_trip(self, session, session_factory):
        user = await add_user(session, "clock")
        stamp = utcnow() - timedelta(hours=1)
        conv = Conversation(user_id=user.id, title="Timed", created_at=stamp, updated_at=stamp)
        session.add(conv)
        await session.commit()

        async with session_factory() as s:
            stored = await s.get(Conversation, conv.id, populate_existing=True)
            assert as_utc(stored.created_at) == stamp
            assert as_utc(stored.updated_at) == stamp
