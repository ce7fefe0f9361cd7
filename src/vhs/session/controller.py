"""Active video selection, deletion and restore from the remote authority."""

from __future__ import annotations

import logging

from vhs.cache.resource import ResourceCache
from vhs.db.models import AnalysisResult, TaskKind, TaskStatus, VideoHint, VideoListItem
from vhs.providers.base import VideoServiceProvider
from vhs.session.state import SessionState
from vhs.utils.hashing import derive_video_key

logger = logging.getLogger(__name__)


class ActiveSessionController:
    """Owns which video is selected and keeps the cache consistent with it.

    ``select`` and ``delete`` are synchronous, so any producer call that
    resumes afterwards already sees the new active video.
    """

    def __init__(self, cache: ResourceCache, provider: VideoServiceProvider, state: SessionState):
        self.cache = cache
        self.provider = provider
        self.state = state

    @property
    def active_locator(self) -> str:
        return self.state.active_locator

    @property
    def active_metadata(self) -> VideoHint | None:
        return self.state.active_metadata

    @property
    def ready(self) -> bool:
        return self.state.ready

    def status(self, kind: TaskKind) -> TaskStatus:
        return self.state.status(kind)

    def select(self, locator: str, metadata: VideoHint | None = None) -> None:
        """Make ``locator`` active, resetting statuses and readiness.

        With ``metadata``, its analysis fields are merged into the cache right
        away so recommended focus and durations are usable before any analyze.
        """
        self.state.reset(locator, metadata)
        if metadata is not None and locator:
            self.cache.merge_analysis(locator, metadata.to_update())
        logger.info("Selected video %s", locator or "(none)")

    def delete(self, locator: str) -> None:
        self.cache.clear(locator)
        if locator and locator == self.state.active_locator:
            self.state.reset()

    async def restore_from_authority(self, locator: str) -> AnalysisResult | None:
        """Fetch the server's analysis when nothing is cached for ``locator``.

        A "not found" answer leaves the cache empty; a later analyze fills it.
        """
        cached = self.cache.get_analysis(locator)
        if cached is not None or not locator:
            return cached

        try:
            lookup = await self.provider.fetch_analysis_by_key(derive_video_key(locator))
        except Exception as e:
            logger.warning("Restoring analysis for %s failed: %s", locator, e)
            return None

        if not lookup.found or lookup.analysis is None:
            logger.info("No stored analysis for %s", locator)
            return None
        return self.cache.merge_analysis(locator, lookup.analysis)

    async def restore_conversation(self, locator: str) -> bool:
        """Load the conversation for ``locator`` from cache or server. Returns readiness."""
        if not locator:
            return False

        if self.cache.get_session(locator):
            return self._mark_ready(locator, True)

        try:
            lookup = await self.provider.fetch_conversation_history(locator)
        except Exception as e:
            logger.warning("Restoring conversation for %s failed: %s", locator, e)
            return False

        if not lookup.found or not lookup.messages:
            return self._mark_ready(locator, False)

        self.cache.save_session(locator, lookup.messages)
        return self._mark_ready(locator, True)

    def _mark_ready(self, locator: str, ready: bool) -> bool:
        if self.state.is_active(locator):
            self.state.ready = ready
        return ready

    async def list_videos(self, user_id: str) -> list[VideoListItem]:
        return await self.provider.list_videos(user_id)

    async def remove_video(self, locator: str, file_name: str, user_id: str) -> None:
        """Delete the video on the server, then everywhere locally.

        APIError from the server propagates and local state is kept.
        """
        await self.provider.delete_video(user_id, file_name)
        self.delete(locator)
