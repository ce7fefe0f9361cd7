"""Pydantic models for cached artifacts and API responses."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskKind(str, Enum):
    ANALYZE = "analyze"
    HIGHLIGHT = "highlight"
    RAG_SETUP = "rag_setup"


class TaskStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class Segment(BaseModel):
    start: float = 0.0
    text: str = ""


class AnalysisResult(BaseModel):
    original_duration_sec: float = 0.0
    segments: list[Segment] = Field(default_factory=list)
    full_text: str = ""
    recommended_focus: list[str] = Field(default_factory=list)
    recommended_durations: list[float] = Field(default_factory=list)
    summary_title: str = ""
    summary_points: list[str] = Field(default_factory=list)


class AnalysisUpdate(BaseModel):
    """Partial AnalysisResult. ``None`` means the field is absent.

    Merging is field by field: present fields overwrite the prior value,
    absent fields keep it.
    """

    original_duration_sec: float | None = None
    segments: list[Segment] | None = None
    full_text: str | None = None
    recommended_focus: list[str] | None = None
    recommended_durations: list[float] | None = None
    summary_title: str | None = None
    summary_points: list[str] | None = None

    def apply_to(self, prior: AnalysisResult | None) -> AnalysisResult:
        """Return a new AnalysisResult with this update layered over ``prior``."""
        base = prior.model_dump() if prior is not None else {}
        base.update(self.model_dump(exclude_none=True))
        return AnalysisResult.model_validate(base)


class HighlightItem(BaseModel):
    highlight_url: str
    thumbnail_url: str = ""
    duration: float = 0.0
    text_score: float | None = None
    voice_score: float | None = None
    final_score: float | None = None
    reason: str | None = None


class HighlightBatch(BaseModel):
    results: list[HighlightItem] = Field(default_factory=list)


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    sent_at: datetime = Field(default_factory=utcnow)


class VideoHint(BaseModel):
    """Metadata known for a video before any analyze round-trip (e.g. from the list)."""

    title: str = ""
    focus: list[str] | None = None
    durations: list[float] | None = None
    summary_title: str = ""
    summary_points: list[str] = Field(default_factory=list)
    segments: list[Segment] | None = None
    duration_sec: float | None = None
    full_text: str | None = None

    def to_update(self) -> AnalysisUpdate:
        """Synthesize the partial analysis this hint implies."""
        full_text = self.full_text or ""
        if not full_text and self.segments:
            full_text = " ".join(s.text for s in self.segments if s.text)

        return AnalysisUpdate(
            original_duration_sec=self.duration_sec or None,
            segments=self.segments,
            full_text=full_text or None,
            recommended_focus=self.focus,
            recommended_durations=self.durations,
            summary_title=self.summary_title or None,
            summary_points=self.summary_points or None,
        )


class VideoListItem(BaseModel):
    file_name: str
    video_url: str
    uploaded_at: str | None = None
    status: str | None = None
    recommended_focus: list[str] = Field(default_factory=list)
    recommended_durations: list[float] = Field(default_factory=list)
    summary_title: str = ""
    summary_points: list[str] = Field(default_factory=list)
    segments: list[Segment] = Field(default_factory=list)
    duration_sec: float = 0.0

    def to_hint(self) -> VideoHint:
        return VideoHint(
            title=self.file_name,
            focus=self.recommended_focus,
            durations=self.recommended_durations,
            summary_title=self.summary_title,
            summary_points=self.summary_points,
            segments=self.segments,
            duration_sec=self.duration_sec,
        )
