"""Abstract interface to the remote video analysis service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from vhs.db.models import (
    AnalysisUpdate,
    HighlightBatch,
    Message,
    Segment,
    VideoListItem,
)


@dataclass
class HighlightRequest:
    locator: str
    focus: str
    duration_sec: int
    count: int
    segments: list[Segment]
    full_text: str
    mode: str = "text"
    total_duration_sec: float = 0.0


@dataclass
class Answer:
    answer: str
    answered_at: datetime | None = None


@dataclass
class HistoryLookup:
    found: bool
    messages: list[Message] = field(default_factory=list)


@dataclass
class AnalysisLookup:
    found: bool
    analysis: AnalysisUpdate | None = None


class VideoServiceProvider(ABC):
    """Producers and authority lookups. Every method raises APIError on failure."""

    @abstractmethod
    async def analyze(self, locator: str) -> AnalysisUpdate:
        ...

    @abstractmethod
    async def generate_highlights(self, request: HighlightRequest) -> HighlightBatch:
        ...

    @abstractmethod
    async def setup_conversation(self, locator: str) -> None:
        ...

    @abstractmethod
    async def ask_question(self, locator: str, question: str, user_id: str) -> Answer:
        ...

    @abstractmethod
    async def fetch_conversation_history(self, locator: str) -> HistoryLookup:
        ...

    @abstractmethod
    async def fetch_analysis_by_key(self, video_key: str) -> AnalysisLookup:
        ...

    async def list_videos(self, user_id: str) -> list[VideoListItem]:
        raise NotImplementedError("list_videos not implemented for this provider")

    async def delete_video(self, user_id: str, file_name: str) -> None:
        raise NotImplementedError("delete_video not implemented for this provider")

    async def suggest_title(
        self, reason: str, focus: str, mode: str, index: int | None, duration: float | None
    ) -> str:
        raise NotImplementedError("suggest_title not implemented for this provider")

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
