"""Options of applying a federated role definition and reading its source."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests
import yaml


class UsageError(ValueError):
    """The command's flags were combined incorrectly."""


@dataclass
class ApplyOptions:
    """Where to read a federated role definition from."""

    url: str = ""
    file: str = ""
    verbose: bool = False

    def complete(self) -> ApplyOptions:
        """Check that exactly one of the URL and the file is given."""
        if not self.file and not self.url:
            raise UsageError("Flags file and url cannot be empty at the same time")
        if self.file and self.url:
            raise UsageError("Flags file and url cannot be set at the same time")
        return self

    def read_source(self) -> dict[str, Any]:
        """Fetch and decode the YAML or JSON federated role document."""
        if self.url:
            response = requests.get(self.url)
            with response:
                if response.status_code // 100 != 2:
                    raise requests.HTTPError(
                        f"failed to GET {self.url}, status code {response.status_code}",
                        response=response,
                    )
                text = response.text
        else:
            path = os.path.abspath(self.file)
            with open(path, encoding="utf-8") as handle:
                text = handle.read()

        document = yaml.safe_load(text)
        if not isinstance(document, Mapping):
            raise ValueError("federated role document must be a mapping")
        return dict(document)