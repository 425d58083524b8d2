"""
Client library for the Stark Bank ledger API.

Resource modules (transaction, brcode_payment_log, boleto_holmes_log) declare
their shape and delegate every request to one signed, paginated transport.
"""

__version__ = "0.1.0"

from .auth import Environment, Organization, Project, create_key_pair
from .config import ClientConfig, get_default_user, load_config, set_default_user
from .errors import (
    ApiError,
    ConfigurationError,
    MalformedResponse,
    NetworkError,
    NotFound,
    ServerError,
    StarkLedgerError,
    Unauthorized,
    ValidationError,
)

__all__ = [
    "__version__",
    "Environment",
    "Organization",
    "Project",
    "create_key_pair",
    "ClientConfig",
    "get_default_user",
    "load_config",
    "set_default_user",
    "ApiError",
    "ConfigurationError",
    "MalformedResponse",
    "NetworkError",
    "NotFound",
    "ServerError",
    "StarkLedgerError",
    "Unauthorized",
    "ValidationError",
]
