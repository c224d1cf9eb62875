"""
Serialization for snapshot state.

Example:
    >>> from sitesnap.serialization import JSONCodec
    >>>
    >>> codec = JSONCodec()
    >>> data = codec.encode({"title": "Home"})
    >>> codec.decode(data)
    {'title': 'Home'}
"""

from sitesnap.serialization.codec import Codec, JSONCodec, PydanticCodec
from sitesnap.serialization.json import (
    SiteSnapJSONEncoder,
    json_dumps,
    json_loads,
)

__all__ = [
    "Codec",
    "JSONCodec",
    "PydanticCodec",
    "SiteSnapJSONEncoder",
    "json_dumps",
    "json_loads",
]
