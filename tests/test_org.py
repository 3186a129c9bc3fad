import pytest

from osdkit.org import (
    ACCOUNTS_API_PATH,
    ORGANIZATIONS_API_PATH,
    OrgError,
    SearchType,
    Subscription,
    active_subscriptions,
    check_org_id,
    check_roles,
    clusters_query,
    customers_query,
    describe_api_path,
    format_roles,
    labels_api_path,
    search_api_path,
    search_query,
    search_type,
)


def test_check_org_id_provided():
    assert check_org_id(["testOrgId"]) == "testOrgId"


def test_check_org_id_missing():
    with pytest.raises(OrgError, match="organization id was not provided"):
        check_org_id([])


def test_check_org_id_multiple():
    with pytest.raises(OrgError, match="too many arguments. expected 1 got 2"):
        check_org_id(["testOrgId1", "testOrgId2"])


@pytest.mark.parametrize(
    "user, ebs, expected",
    [
        ("alice", "", SearchType.USER),
        ("alice", "ebs-1", SearchType.USER),
        ("", "ebs-1", SearchType.EBS),
        ("", "", SearchType.NONE),
    ],
)
def test_search_type(user, ebs, expected):
    assert search_type(user, ebs) is expected


def test_search_api_path():
    assert search_api_path("alice", "") == ACCOUNTS_API_PATH
    assert search_api_path("", "ebs-1") == ORGANIZATIONS_API_PATH
    assert search_api_path("", "") == ""


def test_search_query_user_prefix_match():
    assert search_query("alice", "", False) == "search=username like 'alice%'"


def test_search_query_user_part_match():
    assert search_query("alice", "", True) == "search=username like '%alice%'"


def test_search_query_ebs():
    assert search_query("", "12345", False) == "search=ebs_account_id='12345'"


def test_search_query_none():
    assert search_query("", "", True) == ""


def test_check_roles():
    assert check_roles(["a", "b"], ["b"]) is True
    assert check_roles(["a"], ["c", "d"]) is False
    assert check_roles([], ["a"]) is False


def test_format_roles_reverses_with_trailing_spaces():
    assert format_roles(["first", "second"]) == "second first "
    assert format_roles([]) == ""


def test_active_subscriptions_filtering():
    subs = [
        Subscription("c1", "one", "Active"),
        Subscription("c2", "two", "Deprovisioned"),
    ]
    assert active_subscriptions(subs, True) == [subs[0]]
    assert active_subscriptions(subs, False) == subs


def test_customers_query():
    assert customers_query(True) == "type='Subscription'"
    assert customers_query(False) == "type='Config'"


def test_api_paths():
    assert describe_api_path("org1") == ORGANIZATIONS_API_PATH + "/org1"
    assert labels_api_path("org1") == ORGANIZATIONS_API_PATH + "/org1/labels"


def test_clusters_query():
    assert clusters_query("org1") == "search=organization_id='org1'"