"""In-memory cache of per-video artifacts, read-through to the durable tier."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from vhs.db.models import AnalysisResult, AnalysisUpdate, HighlightBatch, Message
from vhs.db.repository import SessionRepository
from vhs.utils.hashing import derive_video_key

logger = logging.getLogger(__name__)


class ResourceCache:
    """Latest known analysis, highlight batch and conversation for each video.

    In memory everything is keyed by the raw video URL. Conversations are
    also persisted to the durable tier under the URL's derived key.
    """

    def __init__(self, repository: SessionRepository):
        self.repository = repository
        self._analysis: dict[str, AnalysisResult] = {}
        self._highlights: dict[str, HighlightBatch] = {}
        self._sessions: dict[str, list[Message]] = {}

    # --- Analysis ---

    def get_analysis(self, locator: str) -> AnalysisResult | None:
        return self._analysis.get(locator)

    def save_analysis(self, locator: str, value: AnalysisResult) -> None:
        self._analysis[locator] = value

    def merge_analysis(self, locator: str, update: AnalysisUpdate) -> AnalysisResult:
        """Layer ``update`` over the cached analysis and store the result."""
        merged = update.apply_to(self._analysis.get(locator))
        self._analysis[locator] = merged
        return merged

    # --- Highlights ---

    def get_highlight(self, locator: str) -> HighlightBatch | None:
        return self._highlights.get(locator)

    def save_highlight(self, locator: str, value: HighlightBatch) -> None:
        self._highlights[locator] = value

    # --- Conversations ---

    def get_session(self, locator: str) -> list[Message]:
        """Conversation for ``locator``; primes memory from the durable tier on a miss."""
        if locator in self._sessions:
            return list(self._sessions[locator])

        stored = self.repository.get(derive_video_key(locator))
        if not stored:
            return []
        try:
            messages = [Message.model_validate(m) for m in stored]
        except (PydanticValidationError, TypeError) as e:
            logger.warning("Evicting unreadable stored session for %s: %s", locator, e)
            self.repository.delete(derive_video_key(locator))
            return []

        self._sessions[locator] = messages
        return list(messages)

    def save_session(self, locator: str, messages: list[Message]) -> None:
        self._sessions[locator] = list(messages)
        self.repository.put(
            derive_video_key(locator),
            [m.model_dump(mode="json") for m in messages],
        )

    def append_message(self, locator: str, message: Message) -> list[Message]:
        messages = self.get_session(locator) + [message]
        self.save_session(locator, messages)
        return messages

    # --- Lifecycle ---

    def clear(self, locator: str) -> None:
        """Forget everything about ``locator`` in every tier. Safe to repeat."""
        self._analysis.pop(locator, None)
        self._highlights.pop(locator, None)
        self._sessions.pop(locator, None)
        self.repository.delete(derive_video_key(locator))
        logger.info("Cleared cached state for %s", locator)
