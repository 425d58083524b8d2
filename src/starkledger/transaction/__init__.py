"""
Transaction resource.

Provides:
- create: batch creation of internal transfers
- get / query / page: statement lookups
"""

from .transaction import Transaction, create, get, page, query, resource

__all__ = [
    "Transaction",
    "resource",
    "create",
    "get",
    "query",
    "page",
]
