"""Mutable state of the active video, shared by the controller and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field

from vhs.db.models import TaskKind, TaskStatus, VideoHint


def _idle_statuses() -> dict[TaskKind, TaskStatus]:
    return {kind: TaskStatus.IDLE for kind in TaskKind}


@dataclass
class SessionState:
    active_locator: str = ""
    active_metadata: VideoHint | None = None
    statuses: dict[TaskKind, TaskStatus] = field(default_factory=_idle_statuses)
    # Q&A readiness survives across questions while the setup status cycles
    ready: bool = False
    composing: bool = False

    def is_active(self, locator: str) -> bool:
        return bool(locator) and locator == self.active_locator

    def status(self, kind: TaskKind) -> TaskStatus:
        return self.statuses[kind]

    def reset(self, locator: str = "", metadata: VideoHint | None = None) -> None:
        self.active_locator = locator
        self.active_metadata = metadata
        self.statuses = _idle_statuses()
        self.ready = False
        self.composing = False
