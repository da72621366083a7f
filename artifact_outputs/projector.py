from __future__ import annotations

import logging
from typing import Any, Callable

from .actions import to_output_value
from .utils import compact_json

LOGGER = logging.getLogger(__name__)

WHOLE_DOCUMENT_OUTPUT = "json_string"

Publisher = Callable[[str, str], None]


def project_outputs(
    parsed: dict[str, Any],
    publish: Publisher,
    *,
    whole_document_name: str = WHOLE_DOCUMENT_OUTPUT,
) -> None:
    publish(whole_document_name, compact_json(parsed))
    for key, value in parsed.items():
        if key == whole_document_name:
            # Published anyway: the later write replaces the whole-document output.
            LOGGER.warning("Field %r collides with the %r output name.", key, whole_document_name)
        publish(key, to_output_value(value))
