"""
JSON serialization utilities for snapshot state.

Snapshot state is usually a plain JSON document, but aggregates often
carry UUIDs and datetimes. The encoder here writes them as strings.
"""

import json
from datetime import datetime
from typing import Any
from uuid import UUID


class SiteSnapJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles UUID and datetime objects.

    - UUID objects: Converted to string representation
    - datetime objects: Converted to ISO 8601 format string

    Example:
        >>> import json
        >>> from uuid import uuid4
        >>> json.dumps({"owner": uuid4()}, cls=SiteSnapJSONEncoder)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def json_dumps(obj: Any) -> str:
    """
    Serialize object to a compact JSON string with UUID and datetime support.

    Non-finite floats (NaN, Infinity) are rejected since they are not
    valid JSON and would not survive a round trip through other readers.

    Raises:
        TypeError: If the object contains an unsupported type
        ValueError: If the object contains a non-finite float or a cycle
    """
    return json.dumps(
        obj,
        cls=SiteSnapJSONEncoder,
        allow_nan=False,
        separators=(",", ":"),
    )


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize a JSON document.

    UUID and datetime strings are NOT converted back to their original
    types; that is the application's responsibility.
    """
    return json.loads(s)


__all__ = [
    "SiteSnapJSONEncoder",
    "json_dumps",
    "json_loads",
]
