from unittest.mock import AsyncMock, MagicMock

import pytest

from tara_call.errors import StorageError
from tara_call.models import FeedbackRecord
from tara_call.services import feedback_store as feedback_store_module
from tara_call.services.feedback_store import FeedbackStore

RECORD = FeedbackRecord(task_completed=True, human_score=5, feedback_text="", agent="tara")


def make_client(execute=None):
    client = MagicMock()
    query = client.table.return_value.insert.return_value
    query.execute = execute or AsyncMock(return_value=MagicMock(data=[RECORD.model_dump()]))
    client.postgrest.aclose = AsyncMock()
    return client


async def test_save_inserts_one_row():
    """Test that a record is inserted into the configured table"""
    client = make_client()
    store = FeedbackStore(client, table="feedback")

    await store.save(RECORD)

    client.table.assert_called_once_with("feedback")
    client.table.return_value.insert.assert_called_once_with([RECORD.model_dump()])
    client.table.return_value.insert.return_value.execute.assert_awaited_once()


async def test_save_failure_raises_storage_error():
    client = make_client(execute=AsyncMock(side_effect=RuntimeError("relation does not exist")))
    store = FeedbackStore(client)

    with pytest.raises(StorageError):
        await store.save(RECORD)


async def test_create_builds_client_once(monkeypatch):
    """Test that create() builds the Supabase client from url and key"""
    client = make_client()
    factory = AsyncMock(return_value=client)
    monkeypatch.setattr(feedback_store_module, "acreate_client", factory)

    store = await FeedbackStore.create("http://supabase.test", "key", table="ratings")

    factory.assert_awaited_once_with("http://supabase.test", "key")
    assert store.client is client
    assert store.table == "ratings"


async def test_close_releases_http_session():
    client = make_client()
    store = FeedbackStore(client)
    await store.close()
    client.postgrest.aclose.assert_awaited_once()
