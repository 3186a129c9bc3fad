import json
from datetime import datetime, timezone

import pytest

from osdkit.servicelog_models import (
    ClustersFile,
    Message,
    parse_bad_reply,
    parse_clusters_file,
    parse_good_reply,
    parse_message,
)

INTERNAL_TEMPLATE = b"""
{
    "severity": "Info",
    "service_name": "SREManualAction",
    "summary": "INTERNAL ONLY, DO NOT SHARE WITH CUSTOMER",
    "description": "${MESSAGE}",
    "internal_only": true
}
"""


def test_parse_internal_template():
    message = parse_message(INTERNAL_TEMPLATE)
    assert message.severity == "Info"
    assert message.service_name == "SREManualAction"
    assert message.description == "${MESSAGE}"
    assert message.internal_only is True
    assert message.cluster_uuid == ""


def test_find_leftovers_in_template():
    message = parse_message(INTERNAL_TEMPLATE)
    assert message.find_leftovers() == ["${MESSAGE}"]


def test_find_leftovers_ignores_cluster_id_and_subscription():
    message = Message(cluster_id="${A}", subscription_id="${B}")
    assert message.find_leftovers() == []


def test_replace_with_flag_changes_all_text_fields():
    message = Message(
        severity="${X}",
        summary="a ${X} b",
        description="${X}${X}",
        subscription_id="${X}",
    )
    message.replace_with_flag("${X}", "val")
    assert message.severity == "val"
    assert message.summary == "a val b"
    assert message.description == "valval"
    assert message.subscription_id == "val"
    assert message.find_leftovers() == []


def test_search_flag():
    message = Message(event_stream_id="id-${CLUSTER_UUID}")
    assert message.search_flag("${CLUSTER_UUID}") is True
    assert message.search_flag("${OTHER}") is False


def test_to_dict_omits_empty_ids():
    data = Message(severity="Info").to_dict()
    assert "cluster_uuid" not in data
    assert "cluster_id" not in data
    assert "subscription_id" not in data
    assert data["internal_only"] is False
    assert data["severity"] == "Info"


def test_to_dict_round_trip():
    message = Message(
        severity="Info",
        service_name="SREManualAction",
        cluster_uuid="uuid-1",
        cluster_id="id-1",
        summary="s",
        description="d",
        internal_only=True,
        event_stream_id="e",
        subscription_id="sub-1",
    )
    assert parse_message(json.dumps(message.to_dict())) == message


def test_parse_clusters_file():
    parsed = parse_clusters_file('{"clusters": ["abc", "def"]}')
    assert parsed == ClustersFile(clusters=["abc", "def"])


def test_parse_clusters_file_rejects_wrong_type():
    with pytest.raises(ValueError):
        parse_clusters_file('{"clusters": "abc"}')


def test_parse_good_reply():
    reply = parse_good_reply(
        {
            "id": "1",
            "severity": "Info",
            "cluster_uuid": "uuid-1",
            "created_at": "2022-01-02T03:04:05Z",
        }
    )
    assert reply.severity == "Info"
    assert reply.cluster_uuid == "uuid-1"
    assert reply.created_at == datetime(2022, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert reply.timestamp is None


def test_parse_good_reply_rejects_bad_timestamp():
    with pytest.raises(ValueError):
        parse_good_reply({"timestamp": "yesterday"})


def test_parse_bad_reply():
    reply = parse_bad_reply(b'{"code": "CLUSTERS-MGMT-404", "reason": "not found"}')
    assert reply.code == "CLUSTERS-MGMT-404"
    assert reply.reason == "not found"


def test_invalid_json_raises():
    with pytest.raises(ValueError):
        parse_message("{not json")


def test_wrong_field_type_raises():
    with pytest.raises(ValueError):
        parse_message('{"severity": 5}')


def test_non_object_raises():
    with pytest.raises(ValueError):
        parse_bad_reply("[1, 2]")