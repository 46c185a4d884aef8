"""
Runs a lifecycle command against storage.

    load snapshot -> command -> diff -> commit (CAS) -> notify

A command that loses the compare-and-swap raises StaleStateError; the caller
decides whether to reload and retry.
"""

from datetime import datetime
from typing import Callable, Optional, TypeVar

from home.schemas.snapshot import Snapshot, diff
from home.schemas.base import utcnow
from home.services.events import ChangePublisher
from home.services.storage import StorageBackend
from home.utils.logging_config import logger

T = TypeVar("T")

Command = Callable[[Snapshot, datetime], tuple[Snapshot, T]]


class Workflow:
    def __init__(
        self,
        backend: StorageBackend,
        publisher: Optional[ChangePublisher] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.backend = backend
        self.publisher = publisher or ChangePublisher(None)
        self.clock = clock

    async def snapshot(self) -> Snapshot:
        return await self.backend.load_snapshot()

    async def run(self, command: Command[T], label: str = "command") -> T:
        """
        Apply `command(snapshot, now)` and commit what it changed.

        Lifecycle errors propagate before anything is written.
        """
        before = await self.backend.load_snapshot()
        after, result = command(before, self.clock())
        changes = diff(before, after)
        if not changes:
            logger.debug(f"{label}: nothing to commit")
            return result

        await self.backend.commit(changes)
        logger.info(f"{label}: committed {len(changes)} changes to {self.backend.name}")
        await self.publisher.publish(changes)
        return result
