"""Change notifications published to Redis after a successful commit."""

import json
from typing import Optional

import redis.asyncio as redis

from home.schemas.snapshot import ChangeSet
from home.settings import settings
from home.utils.logging_config import logger


class ChangePublisher:
    """
    Publishes one message per committed change on CHANGES_CHANNEL.

    Best-effort: a failed publish is logged and never fails the request that
    already committed.
    """

    def __init__(self, client: Optional[redis.Redis], channel: str = settings.CHANGES_CHANNEL):
        self.client = client
        self.channel = channel

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def publish(self, changes: ChangeSet) -> int:
        if self.client is None or not changes:
            return 0
        sent = 0
        for change in changes.changes:
            message = json.dumps(
                {
                    "table": change.table,
                    "op": change.op,
                    "id": change.entity.id,
                    "version": change.entity.version,
                }
            )
            try:
                await self.client.publish(self.channel, message)
                sent += 1
            except Exception as e:
                logger.warning(f"Failed to publish change on {self.channel}: {e}")
                break
        return sent

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
