"""GitHub Actions runner conventions: inputs, outputs, log groups and failure."""

from __future__ import annotations

import json
import os
import sys
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, TextIO

from .errors import InputError
from .utils import compact_json, load_json


def get_input(name: str, *, required: bool = False, env: Mapping[str, str] | None = None) -> str:
    env = os.environ if env is None else env
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = (env.get(key) or "").strip()
    if required and not value:
        raise InputError(f"Input required and not supplied: {name}")
    return value


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def issue_command(command: str, message: str = "", *, stream: TextIO | None = None, **properties: str) -> None:
    stream = stream or sys.stdout
    props = ",".join(f"{k}={_escape_property(str(v))}" for k, v in properties.items() if v)
    head = f"::{command} {props}" if props else f"::{command}"
    stream.write(f"{head}::{_escape_data(message)}\n")
    stream.flush()


@contextmanager
def group(title: str, *, stream: TextIO | None = None) -> Iterator[None]:
    issue_command("group", title, stream=stream)
    try:
        yield
    finally:
        issue_command("endgroup", stream=stream)


def to_output_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return compact_json(value)


class OutputWriter:
    """Writes step outputs to ``$GITHUB_OUTPUT``, or to stdout when run outside a runner."""

    def __init__(self, output_path: str | Path | None = None, *, stream: TextIO | None = None) -> None:
        self.output_path = Path(output_path) if output_path else None
        self.stream = stream
        self.written: dict[str, str] = {}

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "OutputWriter":
        env = os.environ if env is None else env
        return cls(env.get("GITHUB_OUTPUT") or None)

    def __call__(self, name: str, value: str) -> None:
        self.written[name] = value
        if self.output_path is None:
            stream = self.stream or sys.stdout
            if "\n" in value or "\r" in value:
                stream.write(_delimited(name, value))
            else:
                stream.write(f"{name}={value}\n")
            return
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(_delimited(name, value))


def _delimited(name: str, value: str) -> str:
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected delimiter collision while writing output {name}")
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def set_failed(message: str, *, stream: TextIO | None = None) -> int:
    issue_command("error", message, stream=stream)
    return 1


def event_payload(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if env is None else env
    path = env.get("GITHUB_EVENT_PATH")
    if not path:
        return {}
    try:
        return load_json(Path(path), default={}) or {}
    except (OSError, json.JSONDecodeError):
        return {}


def execution_context(env: Mapping[str, str] | None = None) -> dict[str, str]:
    env = os.environ if env is None else env
    return {
        key: value
        for key, value in sorted(env.items())
        if key.startswith(("GITHUB_", "RUNNER_")) and "TOKEN" not in key
    }


def dump_diagnostics(env: Mapping[str, str] | None = None, *, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    with group("Outputting payload...", stream=stream):
        stream.write(compact_json(event_payload(env)) + "\n")
    with group("Outputting context...", stream=stream):
        stream.write(compact_json(execution_context(env)) + "\n")
