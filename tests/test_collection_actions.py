"""
SnipShelf Backend — Collection Action Tests
=============================================

What:  End-to-end tests for createSnippetCollection, updateSnippetCollection
       and listMySnippetCollections through the HTTP surface.
How:   HTTPX client against the real app and a throwaway SQLite database.

What we test:
    ✅ Server-generated id/owner/timestamps on create
    ✅ Single default collection per user across create and update
    ✅ Partial update semantics (omitted vs null)
    ✅ Foreign collections look exactly like missing ones
    ✅ Offset pagination, newest first, total = page size
    ✅ Input validation → BAD_REQUEST (no type coercion)
    ✅ A failed commit is an error, never a success envelope
"""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def _defaults(client):
    items = (await client.data("listMySnippetCollections", {"pageSize": 100}))["items"]
    return {c["name"]: c["isDefault"] for c in items}


class TestCreateCollection:

    @pytest.mark.asyncio
    async def test_create_sets_server_fields(self, alice):
        data = await alice.data("createSnippetCollection", {"name": "SQL"})
        collection = data["collection"]

        assert collection["id"]
        assert collection["userId"] == "user-alice"
        assert collection["name"] == "SQL"
        assert collection["isDefault"] is False
        assert collection["description"] is None
        assert collection["createdAt"] == collection["updatedAt"]

    @pytest.mark.asyncio
    async def test_create_generates_distinct_ids(self, alice):
        first = await alice.data("createSnippetCollection", {"name": "A"})
        second = await alice.data("createSnippetCollection", {"name": "B"})
        assert first["collection"]["id"] != second["collection"]["id"]

    @pytest.mark.asyncio
    async def test_create_default_takes_over_existing_default(self, alice):
        await alice.data("createSnippetCollection", {"name": "SQL", "isDefault": True})
        go = await alice.data("createSnippetCollection", {"name": "Go", "isDefault": True})

        assert go["collection"]["isDefault"] is True
        assert await _defaults(alice) == {"SQL": False, "Go": True}

    @pytest.mark.asyncio
    async def test_default_is_per_user(self, alice, bob):
        await alice.data("createSnippetCollection", {"name": "Mine", "isDefault": True})
        await bob.data("createSnippetCollection", {"name": "Theirs", "isDefault": True})

        assert await _defaults(alice) == {"Mine": True}
        assert await _defaults(bob) == {"Theirs": True}

    @pytest.mark.asyncio
    async def test_create_accepts_optional_fields(self, alice):
        data = await alice.data(
            "createSnippetCollection",
            {"name": "Astro DB helpers", "description": "db snippets", "icon": "puzzle"},
        )
        assert data["collection"]["description"] == "db snippets"
        assert data["collection"]["icon"] == "puzzle"

    @pytest.mark.asyncio
    async def test_empty_name_is_bad_request(self, alice):
        resp = await alice.call("createSnippetCollection", {"name": ""})
        assert resp.status_code == 400
        assert resp.json()["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_missing_name_is_bad_request(self, alice):
        resp = await alice.call("createSnippetCollection", {"description": "no name"})
        assert resp.status_code == 400
        issues = resp.json()["details"]["issues"]
        assert any("name" in issue["loc"] for issue in issues)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["yes", "true", 1])
    async def test_non_boolean_is_default_is_bad_request(self, alice, value):
        resp = await alice.call("createSnippetCollection", {"name": "x", "isDefault": value})

        assert resp.status_code == 400
        assert resp.json()["code"] == "BAD_REQUEST"
        assert (await alice.data("listMySnippetCollections"))["items"] == []


class TestUpdateCollection:

    @pytest.mark.asyncio
    async def test_update_applies_only_sent_fields(self, alice):
        created = (await alice.data(
            "createSnippetCollection",
            {"name": "SQL", "description": "queries", "icon": "db"},
        ))["collection"]

        updated = (await alice.data(
            "updateSnippetCollection", {"id": created["id"], "name": "Postgres"}
        ))["collection"]

        assert updated["name"] == "Postgres"
        assert updated["description"] == "queries"
        assert updated["icon"] == "db"
        assert _ts(updated["createdAt"]) == _ts(created["createdAt"])
        assert _ts(updated["updatedAt"]) > _ts(created["updatedAt"])

    @pytest.mark.asyncio
    async def test_update_with_only_id_still_bumps_updated_at(self, alice):
        created = (await alice.data("createSnippetCollection", {"name": "SQL"}))["collection"]
        updated = (await alice.data(
            "updateSnippetCollection", {"id": created["id"]}
        ))["collection"]

        assert updated["name"] == "SQL"
        assert _ts(updated["updatedAt"]) > _ts(created["updatedAt"])

    @pytest.mark.asyncio
    async def test_explicit_null_clears_description(self, alice):
        created = (await alice.data(
            "createSnippetCollection", {"name": "SQL", "description": "queries"}
        ))["collection"]

        updated = (await alice.data(
            "updateSnippetCollection", {"id": created["id"], "description": None}
        ))["collection"]

        assert updated["description"] is None

    @pytest.mark.asyncio
    async def test_null_name_is_bad_request(self, alice):
        created = (await alice.data("createSnippetCollection", {"name": "SQL"}))["collection"]
        resp = await alice.call("updateSnippetCollection", {"id": created["id"], "name": None})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_update_default_clears_previous_default(self, alice):
        await alice.data("createSnippetCollection", {"name": "SQL", "isDefault": True})
        go = (await alice.data("createSnippetCollection", {"name": "Go"}))["collection"]

        updated = (await alice.data(
            "updateSnippetCollection", {"id": go["id"], "isDefault": True}
        ))["collection"]

        assert updated["isDefault"] is True
        assert await _defaults(alice) == {"SQL": False, "Go": True}

    @pytest.mark.asyncio
    async def test_setting_default_twice_keeps_single_default(self, alice):
        sql = (await alice.data(
            "createSnippetCollection", {"name": "SQL", "isDefault": True}
        ))["collection"]

        await alice.data("updateSnippetCollection", {"id": sql["id"], "isDefault": True})

        assert await _defaults(alice) == {"SQL": True}

    @pytest.mark.asyncio
    async def test_unset_default(self, alice):
        sql = (await alice.data(
            "createSnippetCollection", {"name": "SQL", "isDefault": True}
        ))["collection"]

        await alice.data("updateSnippetCollection", {"id": sql["id"], "isDefault": False})

        assert await _defaults(alice) == {"SQL": False}

    @pytest.mark.asyncio
    async def test_foreign_collection_is_not_found(self, alice, bob):
        theirs = (await bob.data("createSnippetCollection", {"name": "Bob's"}))["collection"]

        foreign = await alice.call("updateSnippetCollection", {"id": theirs["id"], "name": "mine"})
        missing = await alice.call("updateSnippetCollection", {"id": "no-such-id", "name": "x"})

        assert foreign.status_code == 404
        assert missing.status_code == 404
        assert foreign.json()["code"] == missing.json()["code"] == "NOT_FOUND"
        assert foreign.json()["message"] == missing.json()["message"] == "Collection not found."
        assert "details" not in foreign.json()

        # Bob's row is untouched
        items = (await bob.data("listMySnippetCollections"))["items"]
        assert items[0]["name"] == "Bob's"


class TestListCollections:

    @pytest.mark.asyncio
    async def test_empty_body_uses_defaults(self, alice):
        data = await alice.data("listMySnippetCollections")
        assert data == {"items": [], "total": 0}

    @pytest.mark.asyncio
    async def test_newest_first_with_offset_pagination(self, alice):
        for name in ("first", "second", "third"):
            await alice.data("createSnippetCollection", {"name": name})

        page1 = await alice.data("listMySnippetCollections", {"page": 1, "pageSize": 2})
        page2 = await alice.data("listMySnippetCollections", {"page": 2, "pageSize": 2})
        page3 = await alice.data("listMySnippetCollections", {"page": 3, "pageSize": 2})

        assert [c["name"] for c in page1["items"]] == ["third", "second"]
        assert [c["name"] for c in page2["items"]] == ["first"]
        assert page3["items"] == []

    @pytest.mark.asyncio
    async def test_total_is_page_item_count(self, alice):
        for name in ("a", "b", "c"):
            await alice.data("createSnippetCollection", {"name": name})

        page = await alice.data("listMySnippetCollections", {"pageSize": 2})
        assert page["total"] == 2

    @pytest.mark.asyncio
    async def test_only_own_collections(self, alice, bob):
        await alice.data("createSnippetCollection", {"name": "alice's"})
        await bob.data("createSnippetCollection", {"name": "bob's"})

        items = (await alice.data("listMySnippetCollections"))["items"]
        assert [c["name"] for c in items] == ["alice's"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"page": 0},
        {"pageSize": 0},
        {"pageSize": 101},
        {"page": 1.5},
        {"page": "2"},
        {"pageSize": "2"},
    ])
    async def test_invalid_pagination_is_bad_request(self, alice, body):
        resp = await alice.call("listMySnippetCollections", body)
        assert resp.status_code == 400
        assert resp.json()["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_page_size_upper_bound_is_accepted(self, alice):
        resp = await alice.call("listMySnippetCollections", {"pageSize": 100})
        assert resp.status_code == 200


class TestCommitFailure:

    @pytest.mark.asyncio
    async def test_failed_commit_is_reported_as_error(self, alice):
        failing_commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))
        )

        with patch.object(AsyncSession, "commit", new=failing_commit):
            resp = await alice.call("createSnippetCollection", {"name": "SQL"})

        failing_commit.assert_awaited_once()
        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == "INTERNAL_SERVER_ERROR"
        assert "success" not in body
        assert "disk I/O" not in body["message"]

        # nothing was saved
        assert (await alice.data("listMySnippetCollections"))["items"] == []

    @pytest.mark.asyncio
    async def test_commit_happens_before_response(self, alice):
        created = (await alice.data("createSnippetCollection", {"name": "SQL"}))["collection"]

        # a fresh request sees the row immediately
        items = (await alice.data("listMySnippetCollections"))["items"]
        assert [c["id"] for c in items] == [created["id"]]
