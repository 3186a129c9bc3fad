"""Queries and result handling for looking up organizations."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

ORGANIZATIONS_API_PATH = "/api/accounts_mgmt/v1/organizations"
ACCOUNTS_API_PATH = "/api/accounts_mgmt/v1/accounts"
CURRENT_ACCOUNT_API_PATH = "/api/accounts_mgmt/v1/current_account"
SUBSCRIPTIONS_API_PATH = "/api/accounts_mgmt/v1/subscriptions"

STATUS_ACTIVE = "Active"
_LIKE_WILDCARD = "%"


class OrgError(ValueError):
    """The arguments of an organization command are not usable."""


class SearchType(enum.IntEnum):
    """The kind of organization search requested."""

    NONE = 0
    USER = 1
    EBS = 2


@dataclass
class Organization:
    """An organization as returned by the accounts API."""

    id: str = ""
    external_id: str = ""
    name: str = ""
    ebs_account_id: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Subscription:
    """A cluster subscription belonging to an organization."""

    cluster_id: str = ""
    display_name: str = ""
    status: str = ""


@dataclass
class Label:
    """A label attached to an organization."""

    id: str = ""
    key: str = ""
    value: str = ""


@dataclass
class Customer:
    """A resource quota identifying a (paying or non-paying) customer."""

    id: str = ""
    organization_id: str = ""
    sku: str = ""


@dataclass
class _User:
    user_name: str = ""
    user_id: str = ""
    roles: list[str] = field(default_factory=list)


def check_org_id(args: Sequence[str]) -> str:
    """Return the single organization id among the arguments."""
    if len(args) == 0:
        raise OrgError(
            "organization id was not provided. please provide a organization id"
        )
    if len(args) != 1:
        raise OrgError(f"too many arguments. expected 1 got {len(args)}")
    return args[0]


def search_type(user: str, ebs_account_id: str) -> SearchType:
    """Pick the search kind; a user name takes precedence."""
    if user:
        return SearchType.USER
    if ebs_account_id:
        return SearchType.EBS
    return SearchType.NONE


def search_api_path(user: str, ebs_account_id: str) -> str:
    """Return the API path to query for the given search."""
    kind = search_type(user, ebs_account_id)
    if kind is SearchType.USER:
        return ACCOUNTS_API_PATH
    if kind is SearchType.EBS:
        return ORGANIZATIONS_API_PATH
    return ""


def search_query(user: str, ebs_account_id: str, part_match: bool) -> str:
    """Return the search parameter for finding organizations."""
    kind = search_type(user, ebs_account_id)
    if kind is SearchType.USER:
        prepend = _LIKE_WILDCARD if part_match else ""
        return f"search=username like '{prepend}{user}{_LIKE_WILDCARD}'"
    if kind is SearchType.EBS:
        return f"search=ebs_account_id='{ebs_account_id}'"
    return ""


def check_roles(roles: Iterable[str], role_args: Iterable[str]) -> bool:
    """Tell whether any of the roles is among the requested ones."""
    wanted = set(role_args)
    return any(role in wanted for role in roles)


def format_roles(roles: Sequence[str]) -> str:
    """Join roles for display, last first, each followed by a space."""
    return "".join(f"{role} " for role in reversed(roles))


def active_subscriptions(
    subscriptions: Iterable[Subscription], only_active: bool
) -> list[Subscription]:
    """Keep every subscription, or only active ones when asked."""
    return [
        sub
        for sub in subscriptions
        if not only_active or sub.status == STATUS_ACTIVE
    ]


def customers_query(paying: bool) -> str:
    """Return the resource quota search for paying or non-paying customers."""
    subscription_type = "Subscription" if paying else "Config"
    return f"type='{subscription_type}'"


def labels_api_path(org_id: str) -> str:
    """Return the API path of an organization's labels."""
    return f"{ORGANIZATIONS_API_PATH}/{org_id}/labels"


def describe_api_path(org_id: str) -> str:
    """Return the API path of one organization."""
    return f"{ORGANIZATIONS_API_PATH}/{org_id}"


def clusters_query(org_id: str) -> str:
    """Return the subscription search for an organization's clusters."""
    return f"search=organization_id='{org_id}'"