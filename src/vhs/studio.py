"""Application context: builds and owns the cache, orchestrator and controller."""

from __future__ import annotations

import logging
from typing import Callable

from vhs.cache.resource import ResourceCache
from vhs.core.config import VHSConfig
from vhs.db.repository import SessionRepository, now_ms
from vhs.pipeline.orchestrator import TaskOrchestrator
from vhs.providers.base import VideoServiceProvider
from vhs.providers.http import HttpVideoService
from vhs.session.controller import ActiveSessionController
from vhs.session.state import SessionState

logger = logging.getLogger(__name__)


class Studio:
    """One application session. Create once, pass it around, ``close()`` when done.

    Usable as an async context manager::

        async with Studio(config) as studio:
            studio.controller.select(url)
            outcome = await studio.orchestrator.analyze(url)
    """

    def __init__(
        self,
        config: VHSConfig,
        provider: VideoServiceProvider | None = None,
        *,
        clock: Callable[[], int] = now_ms,
    ):
        self.config = config
        self.repository = SessionRepository(config.db_path, ttl_ms=config.session_ttl_ms, clock=clock)
        self.provider = provider or HttpVideoService(config)
        self.state = SessionState()
        self.cache = ResourceCache(self.repository)
        self.orchestrator = TaskOrchestrator(
            self.cache, self.provider, self.state, user_id=config.user_id
        )
        self.controller = ActiveSessionController(self.cache, self.provider, self.state)
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.state.reset()
        try:
            await self.provider.close()
        finally:
            self.repository.close()
        logger.debug("Studio closed")

    async def __aenter__(self) -> Studio:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
