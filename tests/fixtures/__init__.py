"""
Sample API payloads shared by the tests.
"""

SANDBOX_URL = "https://sandbox.api.starkbank.com/v2"


def make_transaction_json(index: int, **overrides) -> dict:
    """Raw transaction as returned by the API."""
    data = {
        "id": f"{6000000000000000 + index}",
        "amount": 100 * (index + 1),
        "description": f"funds redistribution {index}",
        "externalId": f"transaction-{index}",
        "receiverId": "5768064935133184",
        "tags": ["test"],
        "fee": 0,
        "source": "self",
        "balance": 1000000 - index,
        "created": "2020-03-10 10:30:00.000",
    }
    data.update(overrides)
    return data
