"""Helpers for choosing and unpacking a release archive of the tool."""

from __future__ import annotations

import io
import os
import shutil
import tarfile
from typing import IO

import semver

_OS_NAMES = {
    "linux": "Linux",
    "darwin": "Darwin",
    "windows": "Windows",
}

_ARCH_NAMES = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def asset_os(system: str) -> str:
    """Return the operating system name used in release file names, or ''."""
    return _OS_NAMES.get(system.lower(), "")


def asset_arch(machine: str) -> str:
    """Return the architecture name used in release file names, or ''."""
    return _ARCH_NAMES.get(machine.lower(), "")


def is_newer(current: str, latest: str) -> bool:
    """Tell whether ``latest`` (optionally prefixed with 'v') is above ``current``."""
    current_version = semver.VersionInfo.parse(current)
    latest_version = semver.VersionInfo.parse(latest.removeprefix("v"))
    return current_version < latest_version


def extract_member(archive: bytes | IO[bytes], name: str, destination: str) -> bool:
    """Write the member ``name`` of a gzipped tar archive to ``destination``.

    The file is made executable by its owner. Return whether the member was found.
    """
    fileobj = io.BytesIO(archive) if isinstance(archive, (bytes, bytearray)) else archive
    found = False
    with tarfile.open(fileobj=fileobj, mode="r|gz") as tar:
        for member in tar:
            if member.name != name:
                continue
            source = tar.extractfile(member)
            if source is None:
                continue
            fd = os.open(destination, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o700)
            with os.fdopen(fd, "wb") as out, source:
                shutil.copyfileobj(source, out)
            found = True
    return found