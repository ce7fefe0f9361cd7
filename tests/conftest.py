"""Shared fixtures: a scripted in-memory provider and wired-up core objects."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from vhs.cache.resource import ResourceCache
from vhs.core.exceptions import APIError
from vhs.db.models import (
    AnalysisUpdate,
    HighlightBatch,
    HighlightItem,
    Segment,
    VideoListItem,
)
from vhs.db.repository import SessionRepository
from vhs.pipeline.orchestrator import TaskOrchestrator
from vhs.providers.base import (
    AnalysisLookup,
    Answer,
    HighlightRequest,
    HistoryLookup,
    VideoServiceProvider,
)
from vhs.session.controller import ActiveSessionController
from vhs.session.state import SessionState

VIDEO_A = "https://media.example.com/uploads/alice/match_final.mp4"
VIDEO_B = "https://media.example.com/uploads/bob/cooking_show.mp4"


class FakeProvider(VideoServiceProvider):
    """Provider whose answers are plain attributes.

    ``hold(name)`` returns a future the next ``name`` call waits on, so a test
    can interleave navigation with an in-flight call. ``fail[name]`` makes a
    call raise after its gate opens.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.gates: dict[str, asyncio.Future] = {}
        self.fail: dict[str, Exception] = {}
        self.analysis = AnalysisUpdate(
            original_duration_sec=120.0,
            segments=[Segment(start=0.0, text="kick off"), Segment(start=42.5, text="goal!")],
            full_text="kick off goal!",
            recommended_focus=["goals", "crowd"],
            recommended_durations=[30, 60],
            summary_title="Final match",
            summary_points=["Early goal"],
        )
        self.batch = HighlightBatch(results=[
            HighlightItem(
                highlight_url="https://media.example.com/hl/1.mp4",
                thumbnail_url="https://media.example.com/hl/1.jpg",
                duration=30.0,
                final_score=0.91,
                reason="Goal and crowd reaction",
            )
        ])
        self.answer = Answer(answer="They scored in the 42nd second.")
        self.history = HistoryLookup(found=False)
        self.lookup = AnalysisLookup(found=False)
        self.videos: list[VideoListItem] = []
        self.title = "Stunning early goal"

    def hold(self, name: str) -> asyncio.Future:
        gate = asyncio.get_running_loop().create_future()
        self.gates[name] = gate
        return gate

    def called(self, name: str) -> list[tuple]:
        return [args for n, args in self.calls if n == name]

    async def _call(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        gate = self.gates.pop(name, None)
        if gate is not None:
            await gate
        if name in self.fail:
            raise self.fail[name]

    async def analyze(self, locator: str) -> AnalysisUpdate:
        await self._call("analyze", locator)
        return self.analysis

    async def generate_highlights(self, request: HighlightRequest) -> HighlightBatch:
        await self._call("generate_highlights", request)
        return self.batch

    async def setup_conversation(self, locator: str) -> None:
        await self._call("setup_conversation", locator)

    async def ask_question(self, locator: str, question: str, user_id: str) -> Answer:
        await self._call("ask_question", locator, question, user_id)
        return self.answer

    async def fetch_conversation_history(self, locator: str) -> HistoryLookup:
        await self._call("fetch_conversation_history", locator)
        return self.history

    async def fetch_analysis_by_key(self, video_key: str) -> AnalysisLookup:
        await self._call("fetch_analysis_by_key", video_key)
        return self.lookup

    async def list_videos(self, user_id: str) -> list[VideoListItem]:
        await self._call("list_videos", user_id)
        return self.videos

    async def delete_video(self, user_id: str, file_name: str) -> None:
        await self._call("delete_video", user_id, file_name)

    async def suggest_title(self, reason, focus, mode, index, duration) -> str:
        await self._call("suggest_title", reason, focus, mode, index, duration)
        return self.title


def api_error(endpoint: str = "/analyze", status: int = 500) -> APIError:
    return APIError(f"{endpoint} returned HTTP {status}", endpoint=endpoint, status_code=status)


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "cache.db"


@pytest.fixture()
def repo(db_path: Path) -> SessionRepository:
    r = SessionRepository(db_path)
    yield r
    r.close()


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def cache(repo: SessionRepository) -> ResourceCache:
    return ResourceCache(repo)


@pytest.fixture()
def state() -> SessionState:
    return SessionState()


@pytest.fixture()
def orchestrator(cache: ResourceCache, provider: FakeProvider, state: SessionState) -> TaskOrchestrator:
    return TaskOrchestrator(cache, provider, state)


@pytest.fixture()
def controller(cache: ResourceCache, provider: FakeProvider, state: SessionState) -> ActiveSessionController:
    return ActiveSessionController(cache, provider, state)
