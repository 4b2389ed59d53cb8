# parkdesk/utils/json_parser.py
"""
Helpers for the JSON documents kept in the key-value store.
"""

import json
from typing import Any

from parkdesk.errors import MalformedStoredData


def decode_json(raw: str, key: str = "") -> Any:
    """Parse a stored JSON document. Raises MalformedStoredData on error."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedStoredData(key, str(e)) from e


def encode_json(value: Any) -> str:
    """Serialize a JSON-compatible value with a stable layout."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
