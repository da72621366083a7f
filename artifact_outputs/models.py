from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class WorkflowRun:
    id: int
    started_at: str | None = None
    status: str | None = None


@dataclass(slots=True)
class Artifact:
    id: int
    name: str
    size_in_bytes: int | None = None
    expired: bool = False


@dataclass(slots=True)
class DownloadDescriptor:
    artifact_id: int
    url: str


@dataclass(slots=True)
class ArchiveEntry:
    name: str
    content: bytes


@dataclass(slots=True)
class ApiResponse:
    status: int
    data: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == 200


@dataclass(slots=True)
class ActionInputs:
    artifact_name: str
    artifact_json: str
    workflow_name: str
    token: str
    repository: str
    workflow_run: str | None = None

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]
