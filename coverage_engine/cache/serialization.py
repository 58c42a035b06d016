"""
Cache Serialization Utilities

Cached values are stored as UTF-8 JSON bytes. Every read decodes a new
structure, so callers can never mutate a cached entry in place.
"""

import json
from typing import Any


def serialize_value(value: Any) -> bytes:
    """
    Serialize a Python value to bytes for caching.

    Uses JSON with default handler for non-serializable types.
    """
    def default_handler(obj):
        if hasattr(obj, 'isoformat'):
            return obj.isoformat()
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if hasattr(obj, 'value'):
            return obj.value
        return str(obj)

    json_str = json.dumps(value, default=default_handler, ensure_ascii=False)
    return json_str.encode('utf-8')


def deserialize_value(data: bytes) -> Any:
    """
    Deserialize bytes back to Python value.
    """
    if not data:
        return None
    return json.loads(data.decode('utf-8'))
