"""Preparing, sending checks and reporting for posting service log messages."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from osdkit.fileutils import file_exists, folder_exists
from osdkit.netutils import OfflineError, curl_this, is_online, is_valid_url
from osdkit.servicelog_models import (
    BadReply,
    GoodReply,
    Message,
    parse_bad_reply,
    parse_good_reply,
    parse_message,
)

_log = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{[^{}]*\}")
_PARAM_SYNTAX = "Wrong syntax of '-p' flag. Please use it like this: '-p FOO=BAR'"
_INTERRUPTED = "cannot send message due to program interruption"

TARGET_API_PATH = "/api/service_logs/v1/cluster_logs"

_INTERNAL_TEMPLATE = b"""
{
    "severity": "Info",
    "service_name": "SREManualAction",
    "summary": "INTERNAL ONLY, DO NOT SHARE WITH CUSTOMER",
    "description": "${MESSAGE}",
    "internal_only": true
}
"""


class ServiceLogError(Exception):
    """A service log message could not be prepared or was not accepted."""


def _q(value: Any) -> str:
    return json.dumps(str(value), ensure_ascii=False)


def parse_user_parameters(params: Iterable[str]) -> list[tuple[str, str]]:
    """Turn ``FOO=BAR`` parameters into ``("${FOO}", "BAR")`` pairs."""
    pairs: list[tuple[str, str]] = []
    for item in params:
        if "=" not in item:
            raise ServiceLogError(_PARAM_SYNTAX)
        name, value = item.split("=", 1)
        if not name or not value:
            raise ServiceLogError(_PARAM_SYNTAX)
        pairs.append((f"${{{name}}}", value))
    return pairs


def access_file(path: str) -> bytes:
    """Return the contents of a local file or of a URL."""
    if is_valid_url(path):
        try:
            is_online(path)
        except OfflineError as err:
            raise ServiceLogError(f"host {_q(path)} is not accessible") from err
        return curl_this(path)

    path = os.path.normpath(path)
    if file_exists(path):
        try:
            with open(path, "rb") as handle:
                return handle.read()
        except OSError as err:
            raise ServiceLogError(f"cannot read the file.\nError: {_q(err)}") from err
    if folder_exists(path):
        raise ServiceLogError(
            f"the provided path {_q(path)} is a directory, not a file"
        )
    raise ServiceLogError(f"cannot read the file {_q(path)}")


def read_filter_files(paths: Iterable[str]) -> str:
    """Combine the queries of several files with a logical AND."""
    parts = [
        "(" + access_file(path).decode("utf-8").strip() + ")" for path in paths
    ]
    return " and ".join(parts)


def find_leftovers(text: str) -> list[str]:
    """Return the ``${...}`` placeholders found in the text."""
    return _PLACEHOLDER.findall(text)


def check_leftovers(message: Message, filters: str, excludes: Sequence[str]) -> None:
    """Fail if the template or filters still hold placeholders not excluded."""
    unused = message.find_leftovers() + find_leftovers(filters)
    hints = []
    for placeholder in unused:
        if placeholder in excludes:
            continue
        bare = placeholder.replace("${", "").replace("}", "")
        hint = (
            f"The one of the template files is using '{placeholder}' parameter, "
            f"but '--param' flag is not set for this one. "
            f"Use '-p {bare}=\"FOOBAR\"' to fix this."
        )
        _log.error(hint)
        hints.append(hint)
    if not hints:
        return
    if len(hints) == 1:
        final = "Please define this missing parameter properly."
    else:
        final = f"Please define all {len(hints)} missing parameters properly."
    raise ServiceLogError("\n".join([*hints, final]))


def replace_flags(message: Message, filters: str, name: str, value: str) -> str:
    """Replace a placeholder in the message and filters; return the new filters."""
    if not value:
        raise ServiceLogError(
            f"The selected template is using '{name}' parameter, but '{name}' flag "
            f"was not set. Use '-p {name}=\"FOOBAR\"' to fix this."
        )
    found = False
    if message.search_flag(name):
        found = True
        message.replace_with_flag(name, value)
    if name in filters:
        found = True
        filters = filters.replace(name, value)
    if not found:
        raise ServiceLogError(
            f"The selected template is not using '{name}' parameter, but '--param' "
            f"flag was set. Do not use '-p {name}={value}' to fix this."
        )
    return filters


def internal_message_template() -> Message:
    """Return the fixed template used for internal-only service logs."""
    return parse_message(_INTERNAL_TEMPLATE)


def load_template(template: str, internal_only: bool) -> Message:
    """Load the message template from a file or URL, or the internal one."""
    if internal_only:
        return internal_message_template()
    if not template:
        raise ServiceLogError("Template file is not provided. Use '-t' to fix this.")
    contents = access_file(template)
    try:
        return parse_message(contents)
    except (ValueError, UnicodeDecodeError) as err:
        raise ServiceLogError(
            f"Cannot not parse the JSON template.\nError: {_q(err)}"
        ) from err


def build_post_body(
    message: Message,
    cluster_uuid: str,
    cluster_id: str,
    internal_only: bool,
    subscription_id: str | None,
) -> bytes:
    """Return the JSON body that posts the message to one cluster.

    The template itself is left unchanged. A missing subscription id keeps
    whatever the template holds.
    """
    posted = dataclasses.replace(
        message,
        cluster_uuid=cluster_uuid,
        cluster_id=cluster_id,
        internal_only=internal_only,
    )
    if subscription_id is not None:
        posted.subscription_id = subscription_id
    return json.dumps(posted.to_dict(), ensure_ascii=False).encode("utf-8")


def _decode(body: Any) -> Any:
    try:
        return json.loads(body)
    except (ValueError, TypeError) as err:
        raise ServiceLogError("server returned invalid JSON") from err


def validate_good_response(body: bytes | str, message: Message) -> GoodReply:
    """Check that the server's reply echoes the message that was sent."""
    decoded = _decode(body)
    try:
        reply = parse_good_reply(decoded)
    except ValueError as err:
        raise ServiceLogError(
            f"cannot not parse the JSON template.\nError: {_q(err)}"
        ) from err

    checks = (
        ("severity", "wrong severity information was passed"),
        ("service_name", "wrong service_name information was passed"),
        ("cluster_uuid", "to different cluster"),
        ("summary", "wrong summary information was passed"),
        ("description", "wrong description information was passed"),
    )
    for name, problem in checks:
        wanted = getattr(message, name)
        got = getattr(reply, name)
        if got != wanted:
            separator = " " if problem.startswith("to ") else ", but "
            prefix = "message sent, but" if problem.startswith("to ") else "message sent"
            raise ServiceLogError(
                f"{prefix}{separator}{problem} (wanted {_q(wanted)}, got {_q(got)})"
            )
    return reply


def validate_bad_response(body: bytes | str) -> BadReply:
    """Read the server's error reply."""
    decoded = _decode(body)
    try:
        return parse_bad_reply(decoded)
    except ValueError as err:
        raise ServiceLogError(
            f"cannot parse the error JSON message {_q(err)}"
        ) from err


def _table(rows: Sequence[Sequence[str]]) -> str:
    columns = max((len(row) for row in rows), default=0)
    widths = []
    for index in range(columns - 1):
        cells = [len(row[index]) + 3 for row in rows if len(row) > index + 1]
        widths.append(max([20, *cells]))
    lines = []
    for row in rows:
        cells = [
            cell.ljust(widths[i]) if i < len(row) - 1 else cell
            for i, cell in enumerate(row)
        ]
        lines.append("".join(cells))
    return "\n".join(lines)


@dataclass
class PostResults:
    """The outcome of posting a message to a set of clusters."""

    successful: dict[str, str] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    def check(self, status: int, body: bytes | str, message: Message) -> None:
        """Record the outcome of one post, keyed by the message's cluster UUID."""
        cluster = message.cluster_uuid
        if status < 400:
            try:
                validate_good_response(body, message)
            except ServiceLogError as err:
                self.failed[cluster] = str(err)
            else:
                self.successful[cluster] = (
                    f"Message has been successfully sent to {cluster}"
                )
        else:
            try:
                reply = validate_bad_response(body)
            except ServiceLogError as err:
                self.failed[cluster] = str(err)
            else:
                self.failed[cluster] = reply.reason

    def mark_interrupted(self, cluster_ids: Iterable[str]) -> None:
        """Mark every cluster not yet messaged as failed by interruption."""
        for cluster in cluster_ids:
            if cluster not in self.successful:
                self.failed[cluster] = _INTERRUPTED

    def summary(self) -> str:
        """Return the counts and the tables of messaged clusters."""
        lines = [
            f"Success: {len(self.successful)}, Failed: {len(self.failed)}",
            "",
        ]
        for title, clusters in (
            ("Successful clusters:", self.successful),
            ("Failed clusters:", self.failed),
        ):
            if clusters:
                rows = [["ID", "Status"], *([k, v] for k, v in clusters.items()), []]
                lines.append(title)
                lines.append(_table(rows))
        return "\n".join(lines)