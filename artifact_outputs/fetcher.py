from __future__ import annotations

import logging

import requests

from .actions import group
from .errors import DownloadError
from .github_client import REDIRECT_STATUSES
from .models import DownloadDescriptor

LOGGER = logging.getLogger(__name__)


def request_download(client, artifact_id: int, archive_format: str = "zip") -> DownloadDescriptor:
    try:
        response = client.get_artifact_download(artifact_id, archive_format)
    except requests.RequestException as exc:
        raise DownloadError(f"Unable to request download of artifact {artifact_id}: {exc}") from exc

    location = response.headers.get("Location") or response.headers.get("location")
    if response.status not in REDIRECT_STATUSES | {200} or not location:
        LOGGER.info("Unexpected response: status=%s body=%s", response.status, response.data)
        raise DownloadError(
            f"Unable to get a download location for artifact {artifact_id} (status {response.status})."
        )
    return DownloadDescriptor(artifact_id=artifact_id, url=location)


def fetch_archive(client, artifact_id: int, archive_format: str = "zip") -> bytes:
    with group(f"Downloading artifact {artifact_id}..."):
        descriptor = request_download(client, artifact_id, archive_format)
        try:
            data = client.fetch_bytes(descriptor.url)
        except requests.RequestException as exc:
            raise DownloadError(f"Unable to download artifact {artifact_id}: {exc}") from exc
        LOGGER.info("Downloaded %s bytes for artifact %s.", len(data), artifact_id)
    return data
