from __future__ import annotations

import logging
from typing import Any

from .actions import group
from .errors import NotFoundError, ResolutionError
from .models import Artifact

LOGGER = logging.getLogger(__name__)


def _parse_artifacts(payload: list[Any]) -> list[Artifact]:
    artifacts: list[Artifact] = []
    for item in payload:
        if not isinstance(item, dict) or item.get("id") is None:
            continue
        size = item.get("size_in_bytes")
        artifacts.append(
            Artifact(
                id=int(item["id"]),
                name=str(item.get("name") or ""),
                size_in_bytes=int(size) if isinstance(size, int) else None,
                expired=bool(item.get("expired", False)),
            )
        )
    return artifacts


def find_artifact(artifacts: list[Artifact], artifact_name: str) -> Artifact | None:
    # Exact, case-sensitive; the first match in listing order wins.
    return next((a for a in artifacts if a.name == artifact_name), None)


def locate_artifact(client, run_id: int, artifact_name: str, *, per_page: int = 100) -> int:
    with group(f"Fetching artifacts for run {run_id}..."):
        response = client.list_run_artifacts(run_id, per_page=per_page)
        raw_artifacts = response.data.get("artifacts")
        if not response.ok or not isinstance(raw_artifacts, list):
            LOGGER.info("Unexpected response: status=%s body=%s", response.status, response.data)
            raise ResolutionError(f"Unable to list artifacts for run {run_id}.")

        artifacts = _parse_artifacts(raw_artifacts)
        LOGGER.info("Found %s artifacts.", response.data.get("total_count", len(artifacts)))

        found = find_artifact(artifacts, artifact_name)
        if found is None:
            LOGGER.info("Available artifacts: %s", ", ".join(a.name for a in artifacts) or "(none)")
            raise NotFoundError(f"Unable to find {artifact_name} for run {run_id}.")

        LOGGER.info("Found artifact %s named %s.", found.id, found.name)
        if found.expired:
            LOGGER.warning("Artifact %s has expired; its archive may no longer be downloadable.", found.id)
    return found.id
