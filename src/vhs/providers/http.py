"""HTTP implementation of the video analysis service API."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

import httpx

from vhs.core.config import VHSConfig
from vhs.core.constants import ASK_FAILURE_ANSWER
from vhs.core.exceptions import APIError
from vhs.db.models import (
    AnalysisUpdate,
    HighlightBatch,
    HighlightItem,
    Message,
    Segment,
    VideoListItem,
)
from vhs.providers.base import (
    AnalysisLookup,
    Answer,
    HighlightRequest,
    HistoryLookup,
    VideoServiceProvider,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_time(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from the server; naive values are UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_segments(raw: Any) -> list[Segment] | None:
    if not isinstance(raw, list):
        return None
    segments: list[Segment] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        segments.append(
            Segment(
                start=float(item.get("start") or 0.0),
                text=str(item.get("text") or item.get("segment") or ""),
            )
        )
    return segments


def _str_list(raw: Any) -> list[str] | None:
    if not isinstance(raw, list):
        return None
    return [str(x).strip() for x in raw if x is not None]


def _float_list(raw: Any) -> list[float] | None:
    if not isinstance(raw, list):
        return None
    values: list[float] = []
    for x in raw:
        try:
            values.append(float(x))
        except (TypeError, ValueError):
            continue
    return values


def parse_analysis(data: dict) -> AnalysisUpdate:
    """Map an analysis payload to a partial update.

    Keys missing from the payload stay absent so they do not clobber
    cached values when merged.
    """
    duration = data.get("original_duration_sec", data.get("duration_sec"))
    full_text = data.get("full_text")
    summary_title = data.get("summary_title")
    return AnalysisUpdate(
        original_duration_sec=float(duration) if duration is not None else None,
        segments=_parse_segments(data.get("segments")),
        full_text=str(full_text) if full_text is not None else None,
        recommended_focus=_str_list(data.get("recommended_focus")),
        recommended_durations=_float_list(
            data.get("recommended_duration", data.get("recommended_durations"))
        ),
        summary_title=str(summary_title) if summary_title is not None else None,
        summary_points=_str_list(data.get("summary_points")),
    )


def parse_highlights(data: dict) -> HighlightBatch:
    items: list[HighlightItem] = []
    for raw in data.get("results") or []:
        if not isinstance(raw, dict) or not raw.get("highlight_url"):
            continue
        items.append(HighlightItem.model_validate(raw))
    return HighlightBatch(results=items)


def parse_history(data: dict) -> HistoryLookup:
    messages: list[Message] = []
    for raw in data.get("history") or []:
        if not isinstance(raw, dict) or raw.get("role") not in ("user", "assistant"):
            continue
        sent_at = _parse_time(raw.get("time_full")) or datetime.now(timezone.utc)
        messages.append(
            Message(role=raw["role"], content=str(raw.get("message") or ""), sent_at=sent_at)
        )
    return HistoryLookup(found=bool(messages), messages=messages)


def parse_video_list(data: dict) -> list[VideoListItem]:
    videos: list[VideoListItem] = []
    for raw in data.get("videos") or []:
        if not isinstance(raw, dict) or not raw.get("video_url"):
            continue
        videos.append(
            VideoListItem(
                file_name=str(raw.get("file_name") or ""),
                video_url=raw["video_url"],
                uploaded_at=raw.get("uploaded_at"),
                status=raw.get("status"),
                recommended_focus=_str_list(raw.get("recommended_focus")) or [],
                recommended_durations=_float_list(raw.get("recommended_duration")) or [],
                summary_title=str(raw.get("summary_title") or ""),
                summary_points=_str_list(raw.get("summary_points")) or [],
                segments=_parse_segments(raw.get("segments")) or [],
                duration_sec=float(raw.get("duration_sec") or 0.0),
            )
        )
    return videos


class HttpVideoService(VideoServiceProvider):
    """Talks to the analysis backend over HTTP with one shared AsyncClient."""

    def __init__(self, config: VHSConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.base_url = config.api_base_url.rstrip("/")
        self.voice_base_url = config.voice_api_base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, url: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise APIError(f"{endpoint} request failed: {e}", endpoint=endpoint) from e
        if resp.is_error:
            raise APIError(
                f"{endpoint} returned HTTP {resp.status_code}",
                endpoint=endpoint,
                status_code=resp.status_code,
            )
        return resp

    async def _request_json(self, method: str, url: str, endpoint: str, **kwargs: Any) -> dict:
        resp = await self._send(method, url, endpoint, **kwargs)
        try:
            data = resp.json()
        except ValueError as e:
            raise APIError(f"{endpoint} returned invalid JSON: {e}", endpoint=endpoint) from e
        if not isinstance(data, dict):
            raise APIError(f"{endpoint} returned unexpected payload", endpoint=endpoint)
        if data.get("error"):
            raise APIError(str(data["error"]), endpoint=endpoint, status_code=resp.status_code)
        return data

    @staticmethod
    def _parse(endpoint: str, parser: Callable[[dict], T], data: dict) -> T:
        try:
            return parser(data)
        except (TypeError, ValueError) as e:
            raise APIError(f"{endpoint} returned malformed data: {e}", endpoint=endpoint) from e

    # --- Producers ---

    async def analyze(self, locator: str) -> AnalysisUpdate:
        data = await self._request_json(
            "POST", f"{self.base_url}/analyze", "/analyze", data={"url": locator}
        )
        logger.debug("/analyze returned keys: %s", sorted(data))
        return self._parse("/analyze", parse_analysis, data)

    async def generate_highlights(self, request: HighlightRequest) -> HighlightBatch:
        if request.mode == "voice":
            url, endpoint = f"{self.voice_base_url}/highlight_voice", "/highlight_voice"
        else:
            url, endpoint = f"{self.base_url}/highlight", "/highlight"
        form = {
            "focus": request.focus,
            "duration": str(request.duration_sec),
            "highlight_count": str(request.count),
            "url": request.locator,
            "total_duration": str(request.total_duration_sec),
            "segments_json": json.dumps([s.model_dump() for s in request.segments]),
            "full_text": request.full_text or "",
        }
        data = await self._request_json("POST", url, endpoint, data=form)
        return self._parse(endpoint, parse_highlights, data)

    async def setup_conversation(self, locator: str) -> None:
        await self._send("POST", f"{self.base_url}/rag/setup", "/rag/setup", data={"url": locator})

    async def ask_question(self, locator: str, question: str, user_id: str) -> Answer:
        data = await self._request_json(
            "POST",
            f"{self.base_url}/rag/ask",
            "/rag/ask",
            data={"question": question, "video_url": locator, "user_id": user_id},
        )
        return Answer(
            answer=str(data.get("answer") or ASK_FAILURE_ANSWER),
            answered_at=_parse_time(data.get("time_full")),
        )

    # --- Authority lookups ---

    async def fetch_conversation_history(self, locator: str) -> HistoryLookup:
        data = await self._request_json(
            "GET", f"{self.base_url}/rag/history", "/rag/history", params={"video_url": locator}
        )
        return self._parse("/rag/history", parse_history, data)

    async def fetch_analysis_by_key(self, video_key: str) -> AnalysisLookup:
        data = await self._request_json(
            "GET", f"{self.base_url}/analyze_result", "/analyze_result", params={"video_key": video_key}
        )
        if not data.get("found"):
            return AnalysisLookup(found=False)
        return AnalysisLookup(found=True, analysis=self._parse("/analyze_result", parse_analysis, data))

    # --- Video list ---

    async def list_videos(self, user_id: str) -> list[VideoListItem]:
        data = await self._request_json(
            "GET", f"{self.base_url}/list_videos", "/list_videos", params={"user_id": user_id}
        )
        return self._parse("/list_videos", parse_video_list, data)

    async def delete_video(self, user_id: str, file_name: str) -> None:
        await self._request_json(
            "DELETE",
            f"{self.base_url}/delete_video",
            "/delete_video",
            data={"user_id": user_id, "file_name": file_name},
        )

    async def suggest_title(
        self, reason: str, focus: str, mode: str, index: int | None, duration: float | None
    ) -> str:
        data = await self._request_json(
            "POST",
            f"{self.base_url}/highlight_title",
            "/highlight_title",
            json={"reason": reason, "focus": focus, "mode": mode, "index": index, "duration": duration},
        )
        return str(data.get("title") or "").strip()
