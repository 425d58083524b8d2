"""
BoletoHolmes logs.

A log is generated whenever a BoletoHolmes is modified.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..auth.credentials import User
from ..schemas.resource import Resource, ResourceDescriptor, datetime_field, server_field
from ..transport import client as rest
from ..transport.pagination import Page, PageIterator


@dataclass(frozen=True, kw_only=True)
class Log(Resource):
    """BoletoHolmes log: `holmes` (raw entity), `type` ("solving", "solved"), timestamps."""

    holmes: dict[str, Any] | None = server_field()
    type: str | None = server_field()
    created: datetime | None = datetime_field()
    updated: datetime | None = datetime_field()


resource = ResourceDescriptor.of(Log, name="BoletoHolmesLog")


def get(id: str, user: User | None = None) -> Log:
    return rest.get_by_id(resource, id, user=user)


def query(
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    types: list[str] | None = None,
    holmes_ids: list[str] | None = None,
    user: User | None = None,
) -> PageIterator:
    return rest.get_list(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "types": types,
            "holmes_ids": holmes_ids,
        },
        user=user,
    )


def page(
    cursor: str | None = None,
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    types: list[str] | None = None,
    holmes_ids: list[str] | None = None,
    user: User | None = None,
) -> Page:
    return rest.get_page(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "types": types,
            "holmes_ids": holmes_ids,
        },
        cursor=cursor,
        user=user,
    )
