"""
Resource schemas: the base Resource dataclass, resource descriptors and the
JSON codec shared by every resource module.
"""

from .resource import (
    MAX_PAGE_SIZE,
    Resource,
    ResourceDescriptor,
    datetime_field,
    decode,
    encode,
    encode_query,
    parse_datetime,
    server_field,
)

__all__ = [
    "MAX_PAGE_SIZE",
    "Resource",
    "ResourceDescriptor",
    "datetime_field",
    "decode",
    "encode",
    "encode_query",
    "parse_datetime",
    "server_field",
]
