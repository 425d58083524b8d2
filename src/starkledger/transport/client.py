"""
Signed REST transport shared by every resource module.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote, urlencode, urlsplit

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..auth.credentials import User
from ..auth.signer import sign_request
from ..config import ClientConfig, resolve_user
from ..errors import (
    ConfigurationError,
    ErrorEntry,
    MalformedResponse,
    NetworkError,
    StarkLedgerError,
    error_for_status,
)
from ..schemas.resource import MAX_PAGE_SIZE, ResourceDescriptor, encode_query
from .pagination import Page, PageIterator

logger = logging.getLogger(__name__)


class TransportClient:
    """
    Client for the ledger API.

    Features:
    - Batch create, get by id, single page and lazy list
    - ECDSA-signed requests, per call or default credential
    - API errors mapped to typed exceptions, transport faults to NetworkError
    - No retries unless configured, and then only for GET
    """

    def __init__(self, config: ClientConfig | None = None):
        """
        Initialize transport client.

        Args:
            config: Transport settings (timeout, retries, language)

        Raises:
            ConfigurationError: If the settings are invalid
        """
        self.config = config or ClientConfig()
        errors = self.config.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Accept-Language": self.config.language,
                "User-Agent": self.config.user_agent,
            }
        )

        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.backoff_factor,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def base_url(self, user: User) -> str:
        """API root for the credential's environment, e.g. https://.../v2/"""
        return f"{user.environment.base_url}{self.config.api_version}/"

    def _request(
        self,
        method: str,
        endpoint: str,
        user: User | None = None,
        params: Mapping[str, Any] | None = None,
        json_data: dict | None = None,
    ) -> Any:
        """Make a signed API request and return the decoded JSON body."""
        user = resolve_user(user)

        url = f"{self.base_url(user)}{endpoint}"
        query_string = urlencode(params or {})
        if query_string:
            url = f"{url}?{query_string}"
        body = json.dumps(json_data) if json_data is not None else ""

        # Signed before anything touches the network
        split = urlsplit(url)
        path = f"{split.path}?{split.query}" if split.query else split.path
        headers = sign_request(user, method, path, body)

        logger.debug(f"API Request: {method} {url}")
        if body:
            logger.debug(f"Request body: {body}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                data=body.encode("utf-8") if body else None,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise NetworkError(f"Failed to connect to {split.netloc}: {e}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise NetworkError(f"Request timed out after {self.config.timeout}s: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise NetworkError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            raise self._api_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(
                f"Response to {method} {endpoint} is not valid JSON: {e}"
            ) from e

    def _api_error(self, response: requests.Response) -> StarkLedgerError:
        error_body = response.text
        try:
            payload = response.json()
        except ValueError:
            payload = None

        raw_errors = payload.get("errors") if isinstance(payload, dict) else None
        if isinstance(raw_errors, list):
            errors = [ErrorEntry.from_api_response(e) for e in raw_errors]
        else:
            errors = [ErrorEntry(code="httpError", message=response.reason or "")]

        logger.error(f"API Error {response.status_code}: {'; '.join(str(e) for e in errors)}")
        logger.debug(f"Full response body: {error_body}")

        return error_for_status(response.status_code, errors, error_body)

    @staticmethod
    def _unwrap(data: Any, key: str) -> Any:
        if not isinstance(data, dict) or key not in data:
            raise MalformedResponse(f"Response is missing the '{key}' key")
        return data[key]

    def create(
        self,
        descriptor: ResourceDescriptor,
        entities: Iterable[Any],
        user: User | None = None,
    ) -> list[Any]:
        """
        Create a batch of resources in one request.

        Args:
            descriptor: Resource being created
            entities: Resource instances (or mappings) to create
            user: Credential; defaults to the process-wide one

        Returns:
            Created resources with server-assigned fields populated

        Raises:
            ValidationError: If any entry is rejected; nothing is created
        """
        payload = {descriptor.plural_key: descriptor.encode_many(entities)}
        data = self._request("POST", descriptor.endpoint, user=user, json_data=payload)

        created = descriptor.decode_many(self._unwrap(data, descriptor.plural_key))
        logger.info(f"Created {len(created)} {descriptor.name} resource(s)")
        return created

    def get_by_id(
        self,
        descriptor: ResourceDescriptor,
        id: str,
        user: User | None = None,
    ) -> Any:
        """
        Get a single resource by id.

        Raises:
            NotFound: If the id does not exist
        """
        if not id:
            raise ValueError(f"{descriptor.name} id is required")

        path = f"{descriptor.endpoint}/{quote(str(id), safe='')}"
        data = self._request("GET", path, user=user)
        return descriptor.decode(self._unwrap(data, descriptor.singular_key))

    def get_page(
        self,
        descriptor: ResourceDescriptor,
        query: Mapping[str, Any] | None = None,
        cursor: str | None = None,
        user: User | None = None,
    ) -> Page:
        """
        Fetch exactly one page.

        Args:
            descriptor: Resource being listed
            query: Filters; `limit` is capped at the maximum page size
            cursor: Cursor returned by the previous page of the same query
            user: Credential; defaults to the process-wide one

        Returns:
            Page of resources and the next cursor (None when exhausted)
        """
        params = dict(query or {})
        limit = params.get("limit")
        if limit is None:
            params["limit"] = MAX_PAGE_SIZE
        else:
            limit = int(limit)
            if limit < 0:
                raise ValueError(f"limit must be >= 0, got {limit}")
            params["limit"] = min(limit, MAX_PAGE_SIZE)
        if cursor:
            params["cursor"] = cursor

        data = self._request("GET", descriptor.endpoint, user=user, params=encode_query(params))
        items = descriptor.decode_many(self._unwrap(data, descriptor.plural_key))

        next_cursor = data.get("cursor") or None
        if next_cursor is not None and not isinstance(next_cursor, str):
            raise MalformedResponse(f"Invalid cursor in response: {next_cursor!r}")
        return Page(items=items, cursor=next_cursor)

    def get_list(
        self,
        descriptor: ResourceDescriptor,
        query: Mapping[str, Any] | None = None,
        user: User | None = None,
    ) -> PageIterator:
        """
        Lazily iterate over every matching resource.

        Pages are fetched on demand; `limit` in the query bounds the total
        number of items yielded (None = all).
        """
        def fetch(page_query: Mapping[str, Any], cursor: str | None) -> Page:
            return self.get_page(descriptor, page_query, cursor=cursor, user=user)

        return PageIterator(fetch, query)


_default_client: TransportClient | None = None


def get_default_client() -> TransportClient:
    """Shared client built with default settings on first use."""
    global _default_client
    if _default_client is None:
        _default_client = TransportClient()
    return _default_client


def set_default_client(client: TransportClient | None) -> None:
    """Install the client used by the module-level functions."""
    global _default_client
    _default_client = client


def create(descriptor: ResourceDescriptor, entities: Iterable[Any], user: User | None = None) -> list[Any]:
    return get_default_client().create(descriptor, entities, user=user)


def get_by_id(descriptor: ResourceDescriptor, id: str, user: User | None = None) -> Any:
    return get_default_client().get_by_id(descriptor, id, user=user)


def get_page(
    descriptor: ResourceDescriptor,
    query: Mapping[str, Any] | None = None,
    cursor: str | None = None,
    user: User | None = None,
) -> Page:
    return get_default_client().get_page(descriptor, query, cursor=cursor, user=user)


def get_list(
    descriptor: ResourceDescriptor,
    query: Mapping[str, Any] | None = None,
    user: User | None = None,
) -> PageIterator:
    return get_default_client().get_list(descriptor, query, user=user)
