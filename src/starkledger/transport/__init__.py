"""
Signed, paginated REST transport.

Provides:
- create: batch POST, all-or-nothing
- get_by_id: single resource by id
- get_page: one page plus the cursor to the next one
- get_list: lazy iterator over every page

Every resource module goes through these four entry points.
"""

from .client import (
    TransportClient,
    create,
    get_by_id,
    get_default_client,
    get_list,
    get_page,
    set_default_client,
)
from .pagination import Page, PageIterator

__all__ = [
    "TransportClient",
    "Page",
    "PageIterator",
    "create",
    "get_by_id",
    "get_page",
    "get_list",
    "get_default_client",
    "set_default_client",
]
