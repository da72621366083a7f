from __future__ import annotations

import json
import logging
from typing import Any

from .actions import group
from .archive import ArchiveReader, ZipArchiveReader
from .errors import NotFoundError, ParseError
from .models import ArchiveEntry

LOGGER = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_document(text: str, entry_name: str) -> dict[str, Any]:
    try:
        # json.loads accepts NaN and Infinity unless told otherwise.
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseError(f"Unable to parse {entry_name} as JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ParseError(
            f"Expected {entry_name} to contain a JSON object, got {type(parsed).__name__}."
        )
    return parsed


def read_entry(reader: ArchiveReader, archive_bytes: bytes, entry_name: str) -> ArchiveEntry:
    try:
        names = reader.names(archive_bytes)
    except reader.errors as exc:
        raise ParseError(f"Unable to open artifact archive: {exc}") from exc

    # Verbatim match, directory prefix included; no path normalization.
    if entry_name not in names:
        for name in names:
            LOGGER.info("Archive entry: %s", name)
        raise NotFoundError(
            f"Unable to find {entry_name} in artifact archive. "
            f"Entries present: {', '.join(names) or '(none)'}"
        )

    try:
        content = reader.read(archive_bytes, entry_name)
    except reader.errors as exc:
        raise ParseError(f"Unable to decompress {entry_name}: {exc}") from exc
    return ArchiveEntry(name=entry_name, content=content)


def extract_and_parse(
    archive_bytes: bytes,
    entry_name: str,
    reader: ArchiveReader | None = None,
    *,
    encoding: str = "utf-8",
) -> dict[str, Any]:
    reader = reader or ZipArchiveReader()
    with group(f"Extracting {entry_name}..."):
        entry = read_entry(reader, archive_bytes, entry_name)
        LOGGER.info("Read %s bytes from %s.", len(entry.content), entry.name)
        try:
            text = entry.content.decode(encoding)
        except UnicodeDecodeError as exc:
            raise ParseError(f"Unable to decode {entry.name} as {encoding}: {exc}") from exc
        parsed = parse_document(text, entry.name)
    return parsed
