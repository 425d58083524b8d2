"""
BrcodePayment logs.

Every update of a BrcodePayment generates a log. Logs are never created by
the caller; they are read to inspect the payment's history.
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
    """
    BrcodePayment log.

    Attributes:
        payment: Raw BrcodePayment the log refers to
        errors: Errors linked to this event
        type: Event type, e.g. "success"
        created: Creation datetime
    """

    payment: dict[str, Any] | None = server_field()
    errors: list[str] | None = server_field()
    type: str | None = server_field()
    created: datetime | None = datetime_field()


resource = ResourceDescriptor.of(Log, name="BrcodePaymentLog")


def get(id: str, user: User | None = None) -> Log:
    return rest.get_by_id(resource, id, user=user)


def query(
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    types: list[str] | None = None,
    payment_ids: list[str] | None = None,
    user: User | None = None,
) -> PageIterator:
    """
    Iterate over BrcodePayment logs.

    Args:
        limit: Maximum number of logs (None = all)
        after: Only logs created after this date
        before: Only logs created before this date
        types: Filter by event types
        payment_ids: Filter by BrcodePayment ids
        user: Credential; defaults to the process-wide one
    """
    return rest.get_list(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "types": types,
            "payment_ids": payment_ids,
        },
        user=user,
    )


def page(
    cursor: str | None = None,
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    types: list[str] | None = None,
    payment_ids: list[str] | None = None,
    user: User | None = None,
) -> Page:
    """Fetch up to 100 logs and the cursor to the next page."""
    return rest.get_page(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "types": types,
            "payment_ids": payment_ids,
        },
        cursor=cursor,
        user=user,
    )
