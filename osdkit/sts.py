"""Fetching and comparing the STS credential requests of OpenShift releases."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable

import semver

RELEASE_IMAGE = "quay.io/openshift-release-dev/ocp-release"
CRS_DIR_PREFIX = "/tmp/crs-"

_MISSING_VERSIONS = {
    1: "Release version is required for policy command",
    2: "Previous and new release version is required for policy-diff command",
}


class StsError(Exception):
    """Release versions are unusable or the policy files could not be fetched."""


def validate_versions(versions: Iterable[str], count: int) -> list[str]:
    """Check that exactly ``count`` semantic versions are given and return them."""
    versions = list(versions)
    if len(versions) != count:
        raise StsError(
            _MISSING_VERSIONS.get(
                count, f"expected {count} release versions, got {len(versions)}"
            )
        )
    for version in versions:
        try:
            semver.VersionInfo.parse(version)
        except (ValueError, TypeError) as err:
            raise StsError(
                f"Release version must satisfy the semantic version format: {err}"
            ) from err
    return versions


def _crs_dir(version: str) -> str:
    return f"{CRS_DIR_PREFIX}{version}"


def extract_command(version: str) -> list[str]:
    """Return the command that saves a release's AWS credential requests."""
    return [
        "oc",
        "adm",
        "release",
        "extract",
        f"{RELEASE_IMAGE}:{version}-x86_64",
        "--credentials-requests",
        "--cloud=aws",
        f"--to={_crs_dir(version)}",
    ]


def extract_credentials_requests(version: str) -> str:
    """Save a release's credential requests and return the directory holding them."""
    command = extract_command(version)
    try:
        proc = subprocess.run(command, capture_output=True, check=False)
    except OSError as err:
        raise StsError(f"cannot run {command[0]}: {err}") from err
    if proc.returncode != 0:
        detail = (proc.stderr or b"").decode("utf-8", errors="replace").strip()
        message = f"exit status {proc.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise StsError(message)
    return _crs_dir(version)


def policy(version: str) -> str:
    """Save the STS policy files of a release and return a report line."""
    (version,) = validate_versions([version], 1)
    directory = extract_credentials_requests(version)
    return f"OCP STS policy files have been saved in {directory} directory"


def policy_diff(old_version: str, new_version: str) -> str:
    """Return the diff between the STS policy files of two releases."""
    versions = validate_versions([old_version, new_version], 2)
    old_dir, new_dir = (extract_credentials_requests(v) for v in versions)
    try:
        proc = subprocess.run(
            ["diff", old_dir, new_dir], capture_output=True, check=False
        )
    except OSError:
        return ""
    return (proc.stdout or b"").decode("utf-8", errors="replace")