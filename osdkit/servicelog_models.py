"""Service log message templates and the replies of the service log API."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{[^{}]*\}")
_FRACTION = re.compile(r"\.(\d+)")


def _load(data: Any) -> Mapping[str, Any]:
    """Decode JSON text or bytes, or accept an already decoded mapping."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    if isinstance(data, str):
        data = json.loads(data)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    return data


def _text(obj: Mapping[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _flag(obj: Mapping[str, Any], key: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value


def _number(obj: Mapping[str, Any], key: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _time(obj: Mapping[str, Any], key: str) -> datetime | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a timestamp string")
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError as err:
        raise ValueError(f"invalid timestamp {value!r} in field {key!r}") from err
    if stamp.tzinfo is None:
        raise ValueError(f"timestamp {value!r} in field {key!r} has no time zone")
    return stamp


@dataclass
class ClustersFile:
    """A list of cluster identifiers read from a clusters file."""

    clusters: list[str] = field(default_factory=list)


@dataclass
class GoodReply:
    """The service log API's answer to a successful post."""

    id: str = ""
    kind: str = ""
    href: str = ""
    timestamp: datetime | None = None
    severity: str = ""
    service_name: str = ""
    cluster_uuid: str = ""
    summary: str = ""
    description: str = ""
    event_stream_id: str = ""
    created_at: datetime | None = None


@dataclass
class ServiceLogShort:
    """The short form of a service log entry."""

    summary: str = ""
    description: str = ""
    created_at: datetime | None = None
    severity: str = ""


@dataclass
class ClusterListGoodReply:
    """A page of service log entries."""

    kind: str = ""
    page: int = 0
    size: int = 0
    total: int = 0
    items: list[GoodReply] = field(default_factory=list)


@dataclass
class ServiceLogShortList:
    """A page of short service log entries."""

    kind: str = ""
    page: int = 0
    size: int = 0
    total: int = 0
    items: list[ServiceLogShort] = field(default_factory=list)


@dataclass
class BadReply:
    """The service log API's error answer."""

    id: str = ""
    kind: str = ""
    href: str = ""
    code: str = ""
    reason: str = ""
    operation_id: str = ""


_TEXT_FIELDS = (
    "severity",
    "service_name",
    "cluster_uuid",
    "cluster_id",
    "summary",
    "description",
    "event_stream_id",
    "subscription_id",
)
_LEFTOVER_FIELDS = (
    "severity",
    "service_name",
    "cluster_uuid",
    "summary",
    "description",
    "event_stream_id",
)
_OMIT_EMPTY = frozenset({"cluster_uuid", "cluster_id", "subscription_id"})


@dataclass
class Message:
    """A service log message template."""

    severity: str = ""
    service_name: str = ""
    cluster_uuid: str = ""
    cluster_id: str = ""
    summary: str = ""
    description: str = ""
    internal_only: bool = False
    event_stream_id: str = ""
    subscription_id: str = ""

    def replace_with_flag(self, variable: str, value: str) -> None:
        """Replace every occurrence of a placeholder in all text fields."""
        for name in _TEXT_FIELDS:
            setattr(self, name, getattr(self, name).replace(variable, value))

    def search_flag(self, placeholder: str) -> bool:
        """Tell whether any text field contains the placeholder."""
        return any(placeholder in getattr(self, name) for name in _TEXT_FIELDS)

    def find_leftovers(self) -> list[str]:
        """Return the ``${...}`` placeholders still present in the template."""
        joined = "".join(getattr(self, name) for name in _LEFTOVER_FIELDS)
        return _PLACEHOLDER.findall(joined)

    def to_dict(self) -> dict[str, Any]:
        """Return the message as the API's JSON object."""
        result: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name in _OMIT_EMPTY and not value:
                continue
            result[item.name] = value
        return result


def parse_message(data: Any) -> Message:
    """Build a message from a JSON template."""
    obj = _load(data)
    return Message(
        severity=_text(obj, "severity"),
        service_name=_text(obj, "service_name"),
        cluster_uuid=_text(obj, "cluster_uuid"),
        cluster_id=_text(obj, "cluster_id"),
        summary=_text(obj, "summary"),
        description=_text(obj, "description"),
        internal_only=_flag(obj, "internal_only"),
        event_stream_id=_text(obj, "event_stream_id"),
        subscription_id=_text(obj, "subscription_id"),
    )


def parse_clusters_file(data: Any) -> ClustersFile:
    """Read a ``{"clusters": [...]}`` document."""
    obj = _load(data)
    clusters = obj.get("clusters")
    if clusters is None:
        return ClustersFile()
    if not isinstance(clusters, list) or not all(isinstance(c, str) for c in clusters):
        raise ValueError("field 'clusters' must be a list of strings")
    return ClustersFile(clusters=list(clusters))


def parse_good_reply(data: Any) -> GoodReply:
    """Read the reply to a successful post."""
    obj = _load(data)
    return GoodReply(
        id=_text(obj, "id"),
        kind=_text(obj, "kind"),
        href=_text(obj, "href"),
        timestamp=_time(obj, "timestamp"),
        severity=_text(obj, "severity"),
        service_name=_text(obj, "service_name"),
        cluster_uuid=_text(obj, "cluster_uuid"),
        summary=_text(obj, "summary"),
        description=_text(obj, "description"),
        event_stream_id=_text(obj, "event_stream_id"),
        created_at=_time(obj, "created_at"),
    )


def parse_bad_reply(data: Any) -> BadReply:
    """Read an error reply."""
    obj = _load(data)
    return BadReply(
        id=_text(obj, "id"),
        kind=_text(obj, "kind"),
        href=_text(obj, "href"),
        code=_text(obj, "code"),
        reason=_text(obj, "reason"),
        operation_id=_text(obj, "operation_id"),
    )