"""Arguments and search queries for listing a cluster's service logs."""

from __future__ import annotations

import logging
from collections.abc import Sequence

_log = logging.getLogger(__name__)

TARGET_API_PATH = "/api/service_logs/v1/cluster_logs"


def check_list_args(args: Sequence[str]) -> str:
    """Return the cluster identifier to list service logs for.

    Raises ValueError when none is given; extra arguments are ignored.
    """
    if len(args) == 0:
        raise ValueError(
            "cluster-identifier was not provided. "
            "please provide a cluster id, UUID, or name"
        )
    if len(args) != 1:
        _log.info("Too many arguments. Expected 1 got %d", len(args))
    return args[0]


def list_search_query(cluster_id: str, all_messages: bool, internal_only: bool) -> str:
    """Return the search parameter selecting a cluster's service logs."""
    query = f"search=cluster_uuid = '{cluster_id}'"
    if not all_messages:
        query += " and service_name = 'SREManualAction'"
    if internal_only:
        query += " and internal_only = 'true'"
    return query