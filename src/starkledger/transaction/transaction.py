"""
Transactions: transfers of funds between workspaces.

Transactions created by the caller are internal transfers; other operations
create their own transactions, which can be listed for the statement.
"""

from dataclasses import dataclass
from datetime import date, datetime

from ..auth.credentials import User
from ..schemas.resource import Resource, ResourceDescriptor, datetime_field, server_field
from ..transport import client as rest
from ..transport.pagination import Page, PageIterator


@dataclass(frozen=True, kw_only=True)
class Transaction(Resource):
    """
    Transaction resource.

    Caller-set:
        amount: Amount in cents, e.g. 1234 (= R$ 12.34)
        description: Statement text (min. 10 characters)
        external_id: Unique caller id to avoid duplicates
        receiver_id: Workspace receiving the funds
        tags: Labels for searching

    Server-assigned: id, fee, source, balance, created
    """

    amount: int | None = None
    description: str | None = None
    external_id: str | None = None
    receiver_id: str | None = None
    tags: list[str] | None = None
    fee: int | None = server_field()
    source: str | None = server_field()
    balance: int | None = server_field()
    created: datetime | None = datetime_field()


resource = ResourceDescriptor.of(Transaction)


def create(transactions: list[Transaction], user: User | None = None) -> list[Transaction]:
    """Create transactions; all succeed or none are created."""
    return rest.create(resource, transactions, user=user)


def get(id: str, user: User | None = None) -> Transaction:
    return rest.get_by_id(resource, id, user=user)


def query(
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    tags: list[str] | None = None,
    external_ids: list[str] | None = None,
    ids: list[str] | None = None,
    user: User | None = None,
) -> PageIterator:
    """
    Iterate over transactions, newest first.

    Args:
        limit: Maximum number of transactions (None = all)
        after: Only transactions created after this date
        before: Only transactions created before this date
        tags: Filter by tags
        external_ids: Filter by caller-assigned ids
        ids: Filter by transaction ids
        user: Credential; defaults to the process-wide one
    """
    return rest.get_list(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "tags": tags,
            "external_ids": external_ids,
            "ids": ids,
        },
        user=user,
    )


def page(
    cursor: str | None = None,
    limit: int | None = None,
    after: date | str | None = None,
    before: date | str | None = None,
    tags: list[str] | None = None,
    external_ids: list[str] | None = None,
    ids: list[str] | None = None,
    user: User | None = None,
) -> Page:
    """Fetch up to 100 transactions and the cursor to the next page."""
    return rest.get_page(
        resource,
        {
            "limit": limit,
            "after": after,
            "before": before,
            "tags": tags,
            "external_ids": external_ids,
            "ids": ids,
        },
        cursor=cursor,
        user=user,
    )
