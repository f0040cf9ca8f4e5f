"""
SnipShelf Backend — Service Unit Tests
========================================

What:  Tests for CollectionService / SnippetService without a database.
How:   Mock DB sessions; the ownership helpers are patched where the test
       needs a guard outcome.

What we test:
    ✅ A failed ownership check stops the service before any write
    ✅ SQLAlchemy errors surface as DatabaseError with a generic message
    ✅ A default collection is created after clearing the old one
    ✅ Exceptions copy the context dict they are given
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from snipshelf.auth import CurrentUser
from snipshelf.exceptions import DatabaseError, NotFoundError, ValidationError
from snipshelf.schemas.collection import CreateCollectionInput, ListCollectionsInput
from snipshelf.schemas.snippet import CreateSnippetInput, UpdateSnippetInput
from snipshelf.services.collection_service import CollectionService
from snipshelf.services.snippet_service import SnippetService

ALICE = CurrentUser(id="user-alice")


class TestCollectionService:

    def setup_method(self):
        self.service = CollectionService()

    @pytest.mark.asyncio
    async def test_create_default_clears_before_insert(self, mock_db_session):
        data = CreateCollectionInput(name="Go", is_default=True)

        result = await self.service.create_collection(mock_db_session, ALICE, data)

        # one UPDATE to clear the previous default, then the INSERT via add/flush
        assert mock_db_session.execute.await_count == 1
        clear_stmt = str(mock_db_session.execute.await_args.args[0])
        assert clear_stmt.startswith("UPDATE snippet_collections")
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()
        assert result.collection.is_default is True
        assert result.collection.user_id == "user-alice"

    @pytest.mark.asyncio
    async def test_create_non_default_does_not_touch_others(self, mock_db_session):
        data = CreateCollectionInput(name="SQL")

        result = await self.service.create_collection(mock_db_session, ALICE, data)

        mock_db_session.execute.assert_not_awaited()
        assert result.collection.is_default is False

    @pytest.mark.asyncio
    async def test_flush_failure_becomes_database_error(self, mock_db_session):
        mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("locked"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_collection(
                mock_db_session, ALICE, CreateCollectionInput(name="SQL")
            )

        assert "locked" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_list_failure_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError):
            await self.service.list_collections(mock_db_session, ALICE, ListCollectionsInput())


class TestSnippetService:

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_create_in_foreign_collection_inserts_nothing(self, mock_db_session):
        data = CreateSnippetInput(collection_id="c-bob", title="t", content="c")

        with patch(
            "snipshelf.services.snippet_service.ensure_collection_owned",
            new=AsyncMock(side_effect=NotFoundError(resource="Collection")),
        ):
            with pytest.raises(NotFoundError):
                await self.service.create_snippet(mock_db_session, ALICE, data)

        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_move_to_foreign_collection_issues_no_update(self, mock_db_session):
        existing = MagicMock(id="s1", collection_id="c-alice")
        data = UpdateSnippetInput.model_validate({"id": "s1", "collectionId": "c-bob"})

        with patch(
            "snipshelf.services.snippet_service.ensure_snippet_owned",
            new=AsyncMock(return_value=existing),
        ), patch(
            "snipshelf.services.snippet_service.ensure_collection_owned",
            new=AsyncMock(side_effect=NotFoundError(resource="Collection")),
        ) as guard:
            with pytest.raises(NotFoundError):
                await self.service.update_snippet(mock_db_session, ALICE, data)

        guard.assert_awaited_once_with(mock_db_session, "c-bob", "user-alice")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unchanged_collection_id_skips_target_check(self, mock_db_session):
        existing = MagicMock(id="s1", collection_id="c-alice")
        data = UpdateSnippetInput.model_validate({"id": "s1", "collectionId": "c-alice"})
        refetch_error = OperationalError("SELECT", {}, Exception("x"))

        with patch(
            "snipshelf.services.snippet_service.ensure_snippet_owned",
            new=AsyncMock(return_value=existing),
        ), patch(
            "snipshelf.services.snippet_service.ensure_collection_owned",
            new=AsyncMock(),
        ) as guard, patch.object(
            self.service, "_refetch", new=AsyncMock(side_effect=refetch_error)
        ):
            with pytest.raises(DatabaseError):
                await self.service.update_snippet(mock_db_session, ALICE, data)

        guard.assert_not_awaited()
        update_stmt = mock_db_session.execute.await_args.args[0]
        assert "collection_id" not in update_stmt.compile().params

    @pytest.mark.asyncio
    async def test_archive_failure_becomes_database_error(self, mock_db_session):
        existing = MagicMock(id="s1")
        mock_db_session.execute.side_effect = OperationalError("UPDATE", {}, Exception("x"))

        with patch(
            "snipshelf.services.snippet_service.ensure_snippet_owned",
            new=AsyncMock(return_value=existing),
        ):
            with pytest.raises(DatabaseError) as exc_info:
                await self.service.archive_snippet(mock_db_session, ALICE, "s1")

        assert exc_info.value.context == {"snippet_id": "s1"}


class TestExceptionContext:

    def test_not_found_does_not_mutate_caller_context(self):
        shared = {"action": "getSnippet"}

        error = NotFoundError(resource="Snippet", resource_id="s1", context=shared)

        assert shared == {"action": "getSnippet"}
        assert error.context == {"action": "getSnippet", "resource": "Snippet", "resource_id": "s1"}

    def test_validation_error_does_not_mutate_caller_context(self):
        shared = {}

        error = ValidationError("bad title", field="title", context=shared)

        assert shared == {}
        assert error.context == {"field": "title"}
