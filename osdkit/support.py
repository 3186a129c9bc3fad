"""Limited support reason templates and the replies of the limited support API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class SupportGoodReply:
    """The reply to a successfully created limited support reason."""

    id: str = ""
    kind: str = ""
    href: str = ""
    details: str = ""
    detection_type: str = ""
    summary: str = ""
    creation_timestamp: datetime | None = None


@dataclass
class SupportBadReply:
    """The error reply of the limited support API."""

    id: str = ""
    kind: str = ""
    href: str = ""
    code: str = ""
    reason: str = ""
    details: list[str] = field(default_factory=list)


@dataclass
class LimitedSupport:
    """A limited support reason template."""

    id: str = ""
    template_id: str = ""
    summary: str = ""
    details: str = ""
    detection_type: str = ""

    def replace_with_flag(self, variable: str, value: str) -> None:
        """Replace a placeholder in the summary and details."""
        self.summary = self.summary.replace(variable, value)
        self.details = self.details.replace(variable, value)

    def search_flag(self, placeholder: str) -> bool:
        """Tell whether the summary or details contain the placeholder."""
        return placeholder in self.summary or placeholder in self.details

    def to_dict(self) -> dict[str, Any]:
        """Return the reason as the API's JSON object."""
        result: dict[str, Any] = {}
        if self.id:
            result["id"] = self.id
        if self.template_id:
            result["template_id"] = self.template_id
        result["summary"] = self.summary
        result["details"] = self.details
        result["detection_type"] = self.detection_type
        return result


def _string(obj: Mapping[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def parse_limited_support(data: Any) -> LimitedSupport:
    """Build a limited support reason from JSON text, bytes or a mapping."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    if isinstance(data, str):
        data = json.loads(data)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    return LimitedSupport(
        id=_string(data, "id"),
        template_id=_string(data, "template_id"),
        summary=_string(data, "summary"),
        details=_string(data, "details"),
        detection_type=_string(data, "detection_type"),
    )