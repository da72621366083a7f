from __future__ import annotations

import logging
from typing import Any

from .archive import ArchiveReader
from .extractor import extract_and_parse
from .fetcher import fetch_archive
from .locator import locate_artifact
from .models import ActionInputs
from .projector import Publisher, project_outputs
from .resolver import resolve_run

LOGGER = logging.getLogger(__name__)


def run_pipeline(
    inputs: ActionInputs,
    *,
    client,
    reader: ArchiveReader,
    publish: Publisher,
    cfg: dict[str, Any],
) -> dict[str, Any]:
    """Resolve run, locate artifact, fetch, extract, then publish.

    Outputs are only published once the document has been parsed, so a failure
    in any earlier stage leaves no partial outputs behind.
    """
    github_cfg = cfg.get("github", {})
    archive_cfg = cfg.get("archive", {})

    LOGGER.info("Artifact Name: %s", inputs.artifact_name)
    LOGGER.info("Artifact JSON: %s", inputs.artifact_json)
    LOGGER.info("Workflow Name: %s", inputs.workflow_name)

    run_id = resolve_run(
        client,
        inputs.workflow_run,
        inputs.workflow_name,
        per_page=int(github_cfg.get("runs_per_page", 5)),
    )
    artifact_id = locate_artifact(
        client,
        run_id,
        inputs.artifact_name,
        per_page=int(github_cfg.get("artifacts_per_page", 100)),
    )
    archive_bytes = fetch_archive(client, artifact_id)
    parsed = extract_and_parse(
        archive_bytes,
        inputs.artifact_json,
        reader,
        encoding=str(archive_cfg.get("encoding", "utf-8")),
    )

    project_outputs(
        parsed,
        publish,
        whole_document_name=str(cfg.get("outputs", {}).get("whole_document_name", "json_string")),
    )
    LOGGER.info("Published %s outputs.", len(parsed) + 1)
    return parsed
