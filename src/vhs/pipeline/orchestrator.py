"""Task orchestrator: runs the remote producers for a video and records their status.

Every operation captures the video URL it was invoked for and carries it in
the returned TaskOutcome. Results are always written to the cache under that
URL, but status, readiness and conversation updates are only applied when
the URL is still the active one at the moment the producer call resumes.
Navigating away mid-flight therefore discards the result for the UI without
cancelling the request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Generic, TypeVar

from vhs.cache.resource import ResourceCache
from vhs.core.constants import DEFAULT_USER_ID, FALLBACK_HIGHLIGHT_TITLE, HIGHLIGHT_MODES
from vhs.core.exceptions import ConversationNotReadyError, ValidationError
from vhs.db.models import (
    AnalysisResult,
    HighlightBatch,
    HighlightItem,
    Message,
    Segment,
    TaskKind,
    TaskStatus,
    utcnow,
)
from vhs.providers.base import HighlightRequest, VideoServiceProvider
from vhs.session.state import SessionState

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASK = "ask"


@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    """Result of one orchestrated call, attributed to the URL that started it."""

    kind: str
    locator: str
    value: T | None = None
    error: Exception | None = None
    # True when the active video changed before the call resumed
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


def _positive_int(value: int | str, name: str) -> int:
    error = ValidationError(f"{name} must be a positive integer, got {value!r}")
    if isinstance(value, bool):
        raise error
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise error from None
    if number <= 0 or (not isinstance(value, str) and number != value):
        raise error
    return number


def _require_locator(locator: str) -> None:
    if not locator:
        raise ValidationError("No video selected")


class TaskOrchestrator:
    """Runs analyze, highlight, RAG setup and Q&A calls against a provider.

    Callers must not start a second call of the same kind while one is
    running; the orchestrator does not queue or reject overlapping calls.
    """

    def __init__(
        self,
        cache: ResourceCache,
        provider: VideoServiceProvider,
        state: SessionState,
        *,
        user_id: str = DEFAULT_USER_ID,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.provider = provider
        self.state = state
        self.user_id = user_id
        self.clock = clock

    def _set_status(self, kind: TaskKind, locator: str, status: TaskStatus) -> bool:
        """Apply ``status`` if ``locator`` is still active. Returns whether it was applied."""
        if not self.state.is_active(locator):
            logger.info("Not surfacing %s=%s for inactive video %s", kind.value, status.value, locator)
            return False
        self.state.statuses[kind] = status
        return True

    # --- Analyze ---

    async def analyze(self, locator: str) -> TaskOutcome[AnalysisResult]:
        _require_locator(locator)
        self._set_status(TaskKind.ANALYZE, locator, TaskStatus.RUNNING)

        try:
            update = await self.provider.analyze(locator)
        except Exception as e:
            logger.warning("Analyze failed for %s: %s", locator, e)
            surfaced = self._set_status(TaskKind.ANALYZE, locator, TaskStatus.ERROR)
            return TaskOutcome(TaskKind.ANALYZE.value, locator, error=e, stale=not surfaced)

        # The result belongs to the video that asked for it, active or not
        result = self.cache.merge_analysis(locator, update)
        surfaced = self._set_status(TaskKind.ANALYZE, locator, TaskStatus.DONE)
        return TaskOutcome(TaskKind.ANALYZE.value, locator, value=result, stale=not surfaced)

    # --- Highlights ---

    async def generate_highlights(
        self,
        locator: str,
        focus: str | None,
        duration_sec: int | str,
        count: int | str = 1,
        segments: list[Segment] | None = None,
        full_text: str | None = None,
        mode: str = "text",
    ) -> TaskOutcome[HighlightBatch]:
        """Generate a new highlight batch, replacing any previous one for the video.

        Raises ValidationError without calling the provider when the video is
        missing, no focus is given or recommended, the duration or count is
        not a positive integer, or the mode is unknown.
        """
        _require_locator(locator)
        analysis = self.cache.get_analysis(locator) or AnalysisResult()

        final_focus = (focus or "").strip()
        if not final_focus and analysis.recommended_focus:
            final_focus = analysis.recommended_focus[0].strip()
        if not final_focus:
            raise ValidationError("A highlight focus is required")
        if mode not in HIGHLIGHT_MODES:
            raise ValidationError(f"Unknown highlight mode {mode!r}; use one of {', '.join(HIGHLIGHT_MODES)}")

        request = HighlightRequest(
            locator=locator,
            focus=final_focus,
            duration_sec=_positive_int(duration_sec, "duration"),
            count=_positive_int(count, "highlight count"),
            segments=list(segments) if segments is not None else list(analysis.segments),
            full_text=full_text if full_text is not None else analysis.full_text,
            mode=mode,
            total_duration_sec=analysis.original_duration_sec,
        )

        self._set_status(TaskKind.HIGHLIGHT, locator, TaskStatus.RUNNING)
        try:
            batch = await self.provider.generate_highlights(request)
        except Exception as e:
            logger.warning("Highlight generation failed for %s: %s", locator, e)
            surfaced = self._set_status(TaskKind.HIGHLIGHT, locator, TaskStatus.ERROR)
            return TaskOutcome(TaskKind.HIGHLIGHT.value, locator, error=e, stale=not surfaced)

        self.cache.save_highlight(locator, batch)
        surfaced = self._set_status(TaskKind.HIGHLIGHT, locator, TaskStatus.DONE)
        return TaskOutcome(TaskKind.HIGHLIGHT.value, locator, value=batch, stale=not surfaced)

    async def suggest_title(
        self, item: HighlightItem, focus: str, mode: str, index: int | None = None
    ) -> str:
        """Export title for a highlight. Falls back to a local title if the service fails."""
        if item.reason and item.reason.strip():
            fallback = item.reason.strip()
        elif index is not None:
            fallback = f"Highlight #{index}"
        else:
            fallback = FALLBACK_HIGHLIGHT_TITLE

        try:
            title = await self.provider.suggest_title(item.reason or "", focus, mode, index, item.duration)
        except Exception as e:
            logger.warning("Title suggestion failed, using fallback: %s", e)
            return fallback
        return title or fallback

    # --- Conversation ---

    async def setup_conversation(self, locator: str) -> TaskOutcome[bool]:
        """Prepare Q&A for the video. A failure goes back to idle so it can be retried."""
        _require_locator(locator)
        self._set_status(TaskKind.RAG_SETUP, locator, TaskStatus.RUNNING)

        try:
            await self.provider.setup_conversation(locator)
        except Exception as e:
            logger.warning("Conversation setup failed for %s: %s", locator, e)
            surfaced = self._set_status(TaskKind.RAG_SETUP, locator, TaskStatus.IDLE)
            return TaskOutcome(TaskKind.RAG_SETUP.value, locator, value=False, error=e, stale=not surfaced)

        surfaced = self._set_status(TaskKind.RAG_SETUP, locator, TaskStatus.DONE)
        if surfaced:
            self.state.ready = True
        return TaskOutcome(TaskKind.RAG_SETUP.value, locator, value=True, stale=not surfaced)

    async def ask_question(self, locator: str, question: str) -> TaskOutcome[Message]:
        if not self.state.ready or not self.state.is_active(locator):
            raise ConversationNotReadyError("Set up the conversation for this video first")
        if not question or not question.strip():
            raise ValidationError("Question is empty")

        self.cache.append_message(locator, Message(role="user", content=question, sent_at=self.clock()))
        self.state.composing = True

        try:
            answer = await self.provider.ask_question(locator, question, self.user_id)
        except Exception as e:
            logger.warning("Question failed for %s: %s", locator, e)
            still_active = self._stop_composing(locator)
            return TaskOutcome(ASK, locator, error=e, stale=not still_active)

        if not self._stop_composing(locator):
            logger.info("Dropping answer for %s; active video changed", locator)
            return TaskOutcome(ASK, locator, stale=True)

        reply = Message(role="assistant", content=answer.answer, sent_at=answer.answered_at or self.clock())
        self.cache.append_message(locator, reply)
        return TaskOutcome(ASK, locator, value=reply)

    def _stop_composing(self, locator: str) -> bool:
        if not self.state.is_active(locator):
            return False
        self.state.composing = False
        return True
