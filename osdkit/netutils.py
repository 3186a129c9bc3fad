"""Network helpers for checking and fetching URLs."""

from __future__ import annotations

from urllib.parse import urlsplit

import requests

_ONLINE_TIMEOUT = 2


class OfflineError(ConnectionError):
    """A URL could not be reached or answered with an error status."""


def is_online(url: str) -> None:
    """Check that the URL answers with a 2xx status, following redirects.

    Raises OfflineError otherwise.
    """
    try:
        response = requests.get(url, timeout=_ONLINE_TIMEOUT)
    except requests.RequestException as err:
        raise OfflineError(str(err)) from err
    with response:
        if 200 <= response.status_code < 300:
            return
    raise OfflineError(
        f'timeout or unknown HTTP error, while trying to access "{url}"'
    )


def is_valid_url(value: str) -> bool:
    """Tell whether a string is an absolute URL with a scheme and a host."""
    if not value or any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not parts.netloc:
        return False
    return " " not in parts.netloc


def curl_this(url: str) -> bytes:
    """Fetch a page; return its body on status 200 and empty bytes otherwise."""
    try:
        response = requests.get(url)
    except requests.RequestException as err:
        raise OfflineError(str(err)) from err
    with response:
        if response.status_code == 200:
            return response.content
    return b""