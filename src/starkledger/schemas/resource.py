"""
Resource codec.

Every resource is a frozen dataclass deriving from `Resource`. The transport
layer only sees a `ResourceDescriptor`: the resource name (which gives the
endpoint and the JSON envelope keys) and a constructor turning a raw JSON
mapping into an instance.

Rules:
- Decoding copies declared fields by camelCase name, drops unknown keys and
  leaves missing fields as None
- Encoding emits only fields the caller set, never server-only fields
- Timestamp fields are parsed on decode; bad values are MalformedResponse
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any, TypeVar

from ..errors import MalformedResponse

SERVER_ONLY = "server_only"
TIMESTAMP = "timestamp"

MAX_PAGE_SIZE = 100

R = TypeVar("R", bound="Resource")


def server_field(timestamp: bool = False) -> Any:
    """Field assigned by the API; never sent on create."""
    return field(default=None, metadata={SERVER_ONLY: True, TIMESTAMP: timestamp})


def datetime_field(server_only: bool = True) -> Any:
    """Timestamp field, parsed to an aware datetime on decode."""
    return field(default=None, metadata={SERVER_ONLY: server_only, TIMESTAMP: True})


def to_camel_case(name: str) -> str:
    """external_ids -> externalIds"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_kebab_case(name: str) -> str:
    """BrcodePaymentLog -> brcode-payment-log"""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name).lower()


def parse_datetime(value: Any, field_name: str = "value") -> datetime | None:
    """
    Normalize an API timestamp to an aware datetime (UTC if naive).

    Accepts "2020-03-10 10:30:00.000", "2020-03-10T10:30:00.123456+00:00"
    and plain dates.

    Raises:
        MalformedResponse: If the value is not a valid timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise MalformedResponse(f"Invalid timestamp for {field_name}: {value!r}") from e
    else:
        raise MalformedResponse(f"Invalid timestamp for {field_name}: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, kw_only=True)
class Resource:
    """Base class of every API resource. `id` is assigned by the server."""

    id: str | None = server_field()

    @classmethod
    def from_json(cls: type[R], raw: Any) -> R:
        """Create from an API response object."""
        return decode(cls, raw)

    def to_json(self) -> dict[str, Any]:
        """Body sent on create."""
        return encode(self)


def decode(cls: type[R], raw: Any) -> R:
    """
    Build a resource instance from a raw JSON mapping.

    Raises:
        MalformedResponse: If raw is not a mapping or a timestamp is invalid
    """
    if not isinstance(raw, Mapping):
        raise MalformedResponse(
            f"Expected an object for {cls.__name__}, got {type(raw).__name__}"
        )

    values: dict[str, Any] = {}
    for f in fields(cls):
        if not f.init:
            continue
        value = raw.get(to_camel_case(f.name))
        if f.metadata.get(TIMESTAMP):
            value = parse_datetime(value, f.name)
        values[f.name] = value

    return cls(**values)


def _encode_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Resource):
        return encode(value)
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    return value


def encode(resource: "Resource") -> dict[str, Any]:
    """Serialize caller-set fields of a resource for creation."""
    body: dict[str, Any] = {}
    for f in fields(resource):
        if f.metadata.get(SERVER_ONLY):
            continue
        value = getattr(resource, f.name)
        if value is None:
            continue
        body[to_camel_case(f.name)] = _encode_value(value)
    return body


def _encode_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_encode_query_value(v) for v in value)
    return str(value)


def encode_query(query: Mapping[str, Any] | None) -> dict[str, str]:
    """
    Turn a query mapping into request parameters.

    None values are omitted, keys camel-cased and lists comma-joined.
    """
    params: dict[str, str] = {}
    for key, value in (query or {}).items():
        if value is None:
            continue
        params[to_camel_case(key)] = _encode_query_value(value)
    return params


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Static metadata of one resource type.

    Attributes:
        name: PascalCase resource name, e.g. "BrcodePaymentLog"
        constructor: Maps a raw JSON object to a resource instance
        resource_class: Dataclass whose server-only fields are never sent
    """

    name: str
    constructor: Callable[[Any], Any]
    resource_class: type["Resource"] | None = None

    @classmethod
    def of(cls, resource_class: type["Resource"], name: str | None = None) -> "ResourceDescriptor":
        """Descriptor using the class's own decoder."""
        return cls(
            name=name or resource_class.__name__,
            constructor=resource_class.from_json,
            resource_class=resource_class,
        )

    @property
    def endpoint(self) -> str:
        """URL path: "BrcodePaymentLog" -> "brcode-payment/log"."""
        kebab = to_kebab_case(self.name)
        if kebab.endswith("-log"):
            kebab = kebab[: -len("-log")] + "/log"
        return kebab

    @property
    def singular_key(self) -> str:
        """Envelope key for a single object: "log", "transaction"."""
        return to_camel_case(self.endpoint.split("/")[-1].replace("-", "_"))

    @property
    def plural_key(self) -> str:
        """Envelope key for lists: "logs", "transactions"."""
        return f"{self.singular_key}s"

    def decode(self, raw: Any) -> Any:
        return self.constructor(raw)

    def decode_many(self, raw_items: Any) -> list[Any]:
        """Decode a JSON array, keeping server order."""
        if not isinstance(raw_items, list):
            raise MalformedResponse(
                f"Expected a list under '{self.plural_key}', got {type(raw_items).__name__}"
            )
        return [self.constructor(item) for item in raw_items]

    def encode_many(self, entities: Iterable[Any]) -> list[dict[str, Any]]:
        """Serialize entities for a batch create."""
        encoded = []
        for entity in entities:
            if isinstance(entity, Resource):
                encoded.append(encode(entity))
            elif isinstance(entity, Mapping):
                encoded.append(self._encode_mapping(entity))
            else:
                raise TypeError(
                    f"Cannot create {self.name} from {type(entity).__name__}"
                )
        return encoded

    def _server_only_keys(self) -> set[str]:
        if self.resource_class is None:
            return {"id"}
        return {
            to_camel_case(f.name)
            for f in fields(self.resource_class)
            if f.metadata.get(SERVER_ONLY)
        }

    def _encode_mapping(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        server_only = self._server_only_keys()
        body: dict[str, Any] = {}
        for key, value in entity.items():
            camel_key = to_camel_case(key)
            if value is None or camel_key in server_only:
                continue
            body[camel_key] = _encode_value(value)
        return body
