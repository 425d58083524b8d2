"""
Credentials identifying the caller to the API.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace as dataclass_replace
from enum import Enum

from cryptography.hazmat.primitives.asymmetric import ec

from ..errors import ConfigurationError
from .signer import load_private_key


class Environment(str, Enum):
    """API environment a credential belongs to."""

    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        """Root URL of the API for this environment."""
        if self is Environment.PRODUCTION:
            return "https://api.starkbank.com/"
        return "https://sandbox.api.starkbank.com/"

    @classmethod
    def parse(cls, value: "Environment | str") -> "Environment":
        """Accept an Environment or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(e.value for e in cls)
            raise ConfigurationError(
                f"Invalid environment {value!r}: expected one of {valid}"
            ) from None


@dataclass(frozen=True)
class User(ABC):
    """
    Base credential; use Project or Organization.

    The private key is parsed on construction, so a malformed key fails
    here and never reaches the network.
    """

    environment: Environment
    id: str
    private_key: str = field(repr=False)
    signing_key: ec.EllipticCurvePrivateKey = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.id:
            raise ConfigurationError(f"{type(self).__name__} id is required")
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "environment", Environment.parse(self.environment))
        object.__setattr__(self, "signing_key", load_private_key(self.private_key))

    @property
    @abstractmethod
    def access_id(self) -> str:
        """Identity sent in the Access-Id header."""


@dataclass(frozen=True)
class Project(User):
    """Project credential (`project/<id>`)."""

    @property
    def access_id(self) -> str:
        return f"project/{self.id}"


@dataclass(frozen=True)
class Organization(User):
    """Organization credential, optionally scoped to one workspace."""

    workspace_id: str | None = None

    @property
    def access_id(self) -> str:
        if self.workspace_id:
            return f"organization/{self.id}/workspace/{self.workspace_id}"
        return f"organization/{self.id}"

    def replace(self, workspace_id: str | None) -> "Organization":
        """Return a copy of this credential scoped to another workspace."""
        return dataclass_replace(self, workspace_id=workspace_id)
