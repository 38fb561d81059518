"""Supabase-backed storage for post-call feedback."""

import logging

from supabase import AsyncClient, acreate_client

from ..errors import StorageError
from ..models.feedback import FeedbackRecord

logger = logging.getLogger(__name__)


class FeedbackStore:
    """Writes feedback rows to a Supabase table.

    Create one at process start with `FeedbackStore.create()`, share it
    across requests, and `close()` it at shutdown.
    """

    def __init__(self, client: AsyncClient, table: str = "feedback"):
        self.client = client
        self.table = table

    @classmethod
    async def create(cls, url: str, key: str, table: str = "feedback") -> "FeedbackStore":
        """Connect a Supabase client for `url` and wrap it."""
        client = await acreate_client(url, key)
        logger.info(f"Feedback store ready (table={table})")
        return cls(client, table=table)

    async def save(self, record: FeedbackRecord) -> None:
        """Insert one feedback row."""
        try:
            await self.client.table(self.table).insert([record.model_dump()]).execute()
        except Exception as e:
            logger.error(f"Error saving feedback to database: {e}")
            raise StorageError("Failed to save feedback to database") from e

        logger.info(
            f"Saved feedback for agent '{record.agent}' "
            f"(score={record.human_score}, completed={record.task_completed})"
        )

    async def close(self) -> None:
        """Release the HTTP session held by the Supabase client."""
        await self.client.postgrest.aclose()
