from __future__ import annotations

import io
import logging
from typing import Any

import requests
from tqdm import tqdm

from .models import ApiResponse

LOGGER = logging.getLogger(__name__)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}


class GitHubClient:
    """Thin REST client for the GitHub Actions endpoints the pipeline needs.

    Every listing call returns an :class:`ApiResponse` instead of raising on a
    non-200 status, so each stage decides what an unexpected answer means.
    Transport failures still raise ``requests.RequestException``.
    """

    def __init__(
        self,
        *,
        token: str,
        owner: str,
        repo: str,
        api_url: str = "https://api.github.com",
        api_version: str = "2022-11-28",
        timeout_sec: int = 60,
        user_agent: str = "artifact-outputs",
        progress: bool = True,
        session: requests.Session | None = None,
        download_session: requests.Session | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.progress = progress
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": user_agent,
                "X-GitHub-Api-Version": api_version,
            }
        )
        # Plain session for the storage host: the signed URL carries its own credentials.
        self._download_session = download_session or requests.Session()
        self._download_session.headers.update({"User-Agent": user_agent})

    def _repo_url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/{path.lstrip('/')}"

    def _get(self, path: str, *, params: dict[str, Any] | None = None, allow_redirects: bool = True) -> ApiResponse:
        url = self._repo_url(path)
        LOGGER.debug("GET %s params=%s", url, params)
        response = self.session.get(
            url,
            params=params,
            timeout=self.timeout_sec,
            allow_redirects=allow_redirects,
        )
        data: dict[str, Any] = {}
        if response.content and "json" in response.headers.get("Content-Type", ""):
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict):
                data = payload
        return ApiResponse(status=response.status_code, data=data, headers=dict(response.headers))

    def list_workflow_runs(self, workflow: str, *, status: str = "completed", per_page: int = 5) -> ApiResponse:
        return self._get(
            f"actions/workflows/{workflow}/runs",
            params={"status": status, "per_page": per_page},
        )

    def list_run_artifacts(self, run_id: int, *, per_page: int = 100) -> ApiResponse:
        return self._get(f"actions/runs/{run_id}/artifacts", params={"per_page": per_page})

    def get_artifact_download(self, artifact_id: int, archive_format: str = "zip") -> ApiResponse:
        # Answers 302 with the signed storage URL in Location.
        return self._get(f"actions/artifacts/{artifact_id}/{archive_format}", allow_redirects=False)

    def fetch_bytes(self, url: str, *, chunk_size: int = 1024 * 1024) -> bytes:
        buffer = io.BytesIO()
        with self._download_session.get(url, stream=True, timeout=self.timeout_sec) as resp:
            resp.raise_for_status()
            total = resp.headers.get("Content-Length")
            with tqdm(
                total=int(total) if total and total.isdigit() else None,
                unit="B",
                unit_scale=True,
                desc="artifact",
                disable=None if self.progress else True,
            ) as bar:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        buffer.write(chunk)
                        bar.update(len(chunk))
        return buffer.getvalue()
