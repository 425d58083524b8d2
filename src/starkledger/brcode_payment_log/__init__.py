"""BrcodePayment log resource (read-only)."""

from .log import Log, get, page, query, resource

__all__ = ["Log", "resource", "get", "query", "page"]
