"""Rendering of command responses as JSON, YAML or plain text."""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from typing import Any

import yaml


def _plain(resp: Any) -> Any:
    to_dict = getattr(resp, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(resp) and not isinstance(resp, type):
        return dataclasses.asdict(resp)
    return resp


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def render_response(output: str, resp: Any) -> str:
    """Render a response in the requested format: 'json', 'yaml' or text."""
    if output == "json":
        return json.dumps(
            _plain(resp), indent=4, ensure_ascii=False, default=_json_default
        )
    if output == "yaml":
        return yaml.safe_dump(
            _plain(resp), default_flow_style=False, sort_keys=False, allow_unicode=True
        )
    return str(resp)


def print_response(output: str, resp: Any) -> None:
    """Print a response in the requested format."""
    print(render_response(output, resp))