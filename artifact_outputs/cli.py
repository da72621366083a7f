from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import requests

from . import __version__
from .actions import OutputWriter, dump_diagnostics, get_input, set_failed
from .archive import ZipArchiveReader
from .config import apply_cli_overrides, load_config
from .errors import ArtifactOutputsError, InputError
from .github_client import GitHubClient
from .models import ActionInputs
from .pipeline import run_pipeline
from .utils import setup_logging

LOGGER = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artifact-outputs",
        description="Publish the fields of a JSON file inside a workflow run artifact as step outputs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path)
    parser.add_argument("--artifact-name", help="Artifact to locate (INPUT_ARTIFACT_NAME)")
    parser.add_argument("--artifact-json", help="Archive entry to parse (INPUT_ARTIFACT_JSON)")
    parser.add_argument("--workflow-name", help="Workflow file or id (INPUT_WORKFLOW_NAME)")
    parser.add_argument("--workflow-run", help="Run id; skips run lookup (INPUT_WORKFLOW_RUN)")
    parser.add_argument("--token", help="API token (INPUT_TOKEN)")
    parser.add_argument("--repository", help="owner/repo (GITHUB_REPOSITORY)")
    parser.add_argument("--api-url", default=None)
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--no-progress", action="store_true")
    return parser


def read_inputs(args: argparse.Namespace, env: Mapping[str, str] | None = None) -> ActionInputs:
    env = os.environ if env is None else env

    def _value(flag: str | None, name: str, required: bool) -> str:
        if flag:
            return flag.strip()
        return get_input(name, required=required, env=env)

    repository = (args.repository or env.get("GITHUB_REPOSITORY") or "").strip()
    if repository.count("/") != 1 or not all(repository.split("/")):
        raise InputError(f"Repository must look like owner/repo, got {repository!r}")

    return ActionInputs(
        artifact_name=_value(args.artifact_name, "artifact_name", True),
        artifact_json=_value(args.artifact_json, "artifact_json", True),
        workflow_name=_value(args.workflow_name, "workflow_name", True),
        workflow_run=_value(args.workflow_run, "workflow_run", False) or None,
        token=_value(args.token, "token", True),
        repository=repository,
    )


def build_client(inputs: ActionInputs, cfg: dict[str, Any]) -> GitHubClient:
    github_cfg = cfg["github"]
    return GitHubClient(
        token=inputs.token,
        owner=inputs.owner,
        repo=inputs.repo,
        api_url=github_cfg["api_url"],
        api_version=github_cfg["api_version"],
        timeout_sec=int(github_cfg["timeout_sec"]),
        user_agent=github_cfg["user_agent"],
        progress=bool(cfg["runtime"].get("progress", True)),
    )


def main(argv: list[str] | None = None, env: Mapping[str, str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(argv)
    env = os.environ if env is None else env

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
        return 2
    cfg = apply_cli_overrides(
        cfg,
        {
            "github": {"api_url": args.api_url},
            "runtime": {
                "log_level": args.log_level,
                "progress": False if args.no_progress else None,
            },
        },
    )
    setup_logging(cfg.get("runtime", {}).get("log_level", "INFO"))

    try:
        inputs = read_inputs(args, env)
        client = build_client(inputs, cfg)
        run_pipeline(
            inputs,
            client=client,
            reader=ZipArchiveReader(),
            publish=OutputWriter.from_env(env),
            cfg=cfg,
        )
    except (ArtifactOutputsError, requests.RequestException, OSError, ValueError) as exc:
        LOGGER.debug("Invocation failed", exc_info=True)
        dump_diagnostics(env)
        return set_failed(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
