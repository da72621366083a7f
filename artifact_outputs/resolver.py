from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from .actions import group
from .errors import ResolutionError
from .models import WorkflowRun
from .utils import parse_iso_timestamp

LOGGER = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _parse_runs(payload: list[Any]) -> list[WorkflowRun]:
    runs: list[WorkflowRun] = []
    for item in payload:
        if not isinstance(item, dict) or item.get("id") is None:
            continue
        runs.append(
            WorkflowRun(
                id=int(item["id"]),
                started_at=item.get("run_started_at") or item.get("created_at"),
                status=item.get("status"),
            )
        )
    return runs


def newest_run(runs: list[WorkflowRun]) -> WorkflowRun:
    # Stable sort: runs with equal or missing timestamps keep the platform's order.
    ordered = sorted(
        runs,
        key=lambda r: parse_iso_timestamp(r.started_at) or _OLDEST,
        reverse=True,
    )
    return ordered[0]


def parse_run_id(value: str) -> int:
    text = value.strip()
    # int() also takes signs, underscores and non-ASCII digits.
    if not (text.isascii() and text.isdigit()):
        raise ResolutionError(f"Workflow run must be an integer id, got {value!r}.")
    return int(text)


def resolve_run(client, explicit_run_id: str | None, workflow_name: str, *, per_page: int = 5) -> int:
    if explicit_run_id and explicit_run_id.strip():
        run_id = parse_run_id(explicit_run_id)
        LOGGER.info("Workflow Run:  %s", run_id)
        return run_id

    with group(f"Fetching latest runs for {workflow_name}..."):
        response = client.list_workflow_runs(workflow_name, status="completed", per_page=per_page)
        raw_runs = response.data.get("workflow_runs")
        if not response.ok or not isinstance(raw_runs, list):
            LOGGER.info("Unexpected response: status=%s body=%s", response.status, response.data)
            raise ResolutionError(f"Unable to fetch workflow runs for {workflow_name}.")

        runs = _parse_runs(raw_runs)
        LOGGER.info("Found %s workflow runs.", response.data.get("total_count", len(runs)))
        if not runs:
            raise ResolutionError(f"No completed workflow runs found for {workflow_name}.")

        first, last = runs[0], runs[-1]
        LOGGER.info("First run %s started at %s.", first.id, first.started_at)
        LOGGER.info("Last run %s started at %s.", last.id, last.started_at)

        selected = newest_run(runs)
        if selected.id != first.id:
            LOGGER.warning(
                "Runs were not returned newest-first; using run %s started at %s.",
                selected.id,
                selected.started_at,
            )
    return selected.id
