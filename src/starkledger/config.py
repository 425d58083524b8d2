"""
Configuration management.

Key invariants:
- The default credential is set once at startup and only read afterwards
- Any call may override it by passing `user=` explicitly
- Configuration problems raise ConfigurationError before any request
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from . import __version__
from .auth.credentials import Environment, Organization, Project, User
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en-US", "pt-BR")


@dataclass(frozen=True)
class ClientConfig:
    """Transport settings.

    Retries are off by default; when enabled they only apply to GET
    requests, never to batch creation.
    """

    # Request timeout (seconds)
    timeout: float = 15.0
    # Retry attempts for idempotent requests (0 = caller handles retries)
    max_retries: int = 0
    backoff_factor: float = 0.5
    # Accept-Language sent with every request
    language: str = "en-US"
    api_version: str = "v2"
    user_agent: str = field(default_factory=lambda: f"starkledger-python/{__version__}")

    def validate(self) -> list[str]:
        """Validate settings.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if self.timeout <= 0:
            errors.append("timeout must be positive")
        if self.max_retries < 0:
            errors.append("max_retries must be >= 0")
        if self.backoff_factor < 0:
            errors.append("backoff_factor must be >= 0")
        if self.language not in SUPPORTED_LANGUAGES:
            errors.append(
                f"language must be one of {', '.join(SUPPORTED_LANGUAGES)}, got {self.language!r}"
            )
        if not self.api_version:
            errors.append("api_version is required")

        return errors


@dataclass(frozen=True)
class Settings:
    """Client configuration plus the credential loaded with it, if any."""

    client: ClientConfig = field(default_factory=ClientConfig)
    user: User | None = None


_default_user: User | None = None


def set_default_user(user: User, replace: bool = False) -> None:
    """
    Set the process-wide default credential.

    Call once at startup, before issuing requests.

    Raises:
        ConfigurationError: If already set and replace is False
    """
    global _default_user

    if not isinstance(user, User):
        raise ConfigurationError(f"Expected a Project or Organization, got {type(user).__name__}")
    if _default_user is not None and not replace:
        raise ConfigurationError(
            "Default user is already set; pass user= per call or replace=True"
        )
    _default_user = user
    logger.info(f"Default user set to {user.access_id} ({user.environment.value})")


def get_default_user() -> User | None:
    """Return the process-wide default credential, if set."""
    return _default_user


def clear_default_user() -> None:
    """Forget the default credential (test and shutdown helper)."""
    global _default_user
    _default_user = None


def resolve_user(user: User | None = None) -> User:
    """
    Pick the credential for a call.

    Raises:
        ConfigurationError: If no user was passed and no default is set
    """
    if user is not None:
        if not isinstance(user, User):
            raise ConfigurationError(
                f"Expected a Project or Organization, got {type(user).__name__}"
            )
        return user
    if _default_user is None:
        raise ConfigurationError(
            "No user given: pass user= or call set_default_user() at startup"
        )
    return _default_user


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _read_private_key(user_data: dict) -> str:
    key = os.environ.get("STARKLEDGER_PRIVATE_KEY", user_data.get("private_key"))
    if key:
        return key

    key_path = os.environ.get("STARKLEDGER_PRIVATE_KEY_PATH", user_data.get("private_key_path"))
    if not key_path:
        raise ConfigurationError("private_key or private_key_path is required")
    try:
        return Path(key_path).expanduser().read_text()
    except OSError as e:
        raise ConfigurationError(f"Cannot read private key at {key_path}: {e}") from e


def _load_user(user_data: dict) -> User | None:
    environment = os.environ.get("STARKLEDGER_ENVIRONMENT", user_data.get("environment", "sandbox"))
    project_id = os.environ.get("STARKLEDGER_PROJECT_ID", user_data.get("project_id"))
    organization_id = os.environ.get(
        "STARKLEDGER_ORGANIZATION_ID", user_data.get("organization_id")
    )

    if project_id and organization_id:
        raise ConfigurationError("Set either project_id or organization_id, not both")

    if project_id:
        return Project(
            environment=environment,
            id=str(project_id),
            private_key=_read_private_key(user_data),
        )
    if organization_id:
        workspace_id = os.environ.get("STARKLEDGER_WORKSPACE_ID", user_data.get("workspace_id"))
        return Organization(
            environment=environment,
            id=str(organization_id),
            private_key=_read_private_key(user_data),
            workspace_id=str(workspace_id) if workspace_id else None,
        )
    return None


def load_config(config_path: Path) -> Settings:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - STARKLEDGER_ENVIRONMENT (sandbox/production)
    - STARKLEDGER_PROJECT_ID
    - STARKLEDGER_ORGANIZATION_ID
    - STARKLEDGER_WORKSPACE_ID
    - STARKLEDGER_PRIVATE_KEY (PEM contents)
    - STARKLEDGER_PRIVATE_KEY_PATH
    - STARKLEDGER_TIMEOUT (seconds)
    - STARKLEDGER_LANGUAGE (en-US/pt-BR)

    Raises:
        ConfigurationError: If the file or the resulting settings are invalid
    """
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    client_data = data.get("client", {}) or {}
    try:
        client = ClientConfig(
            timeout=float(os.environ.get("STARKLEDGER_TIMEOUT", client_data.get("timeout", 15.0))),
            max_retries=int(client_data.get("max_retries", 0)),
            backoff_factor=float(client_data.get("backoff_factor", 0.5)),
            language=os.environ.get("STARKLEDGER_LANGUAGE", client_data.get("language", "en-US")),
            api_version=str(client_data.get("api_version", "v2")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid client settings: {e}") from e

    errors = client.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    user = _load_user(data.get("user", {}) or {})
    return Settings(client=client, user=user)
