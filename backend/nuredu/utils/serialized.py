"""Encode string sequences into single text columns and back.

Lessons store their list-like fields (equipment, video links,
presentation links, additional resources) as JSON array text. An empty
sequence is always written as ``"[]"``; a missing or blank stored value
reads back as an empty list.
"""

import json
from typing import Iterable, List

from ..errors import ParseError

ARRAY_FIELDS = ("lesson_equipment", "video_links", "presentation_links", "additional_resources")
EMPTY = "[]"


def dump_list(values: Iterable[str]) -> str:
    """Serialize `values` to JSON array text, keeping non-ASCII as is."""
    return json.dumps([str(v) for v in (values or [])], ensure_ascii=False)


def load_list(raw, field: str = "value") -> List[str]:
    """Decode JSON array text into a list of strings.

    Raises `ParseError` when `raw` is not valid JSON or does not decode
    to a list of strings.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return []
    if isinstance(raw, list):
        values = raw
    else:
        try:
            values = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise ParseError(field, raw) from exc
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ParseError(field, raw)
    return values
