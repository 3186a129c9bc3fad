import pytest

from osdkit.egress import (
    ClusterInfo,
    EgressVerification,
    EgressVerificationError,
    default_validate_egress_input,
)


class FakeEC2:
    def __init__(self, subnets=None, groups=None, fail=False):
        self.subnets = subnets
        self.groups = groups
        self.fail = fail
        self.calls = []

    def describe_subnets(self, Filters):
        self.calls.append(("subnets", Filters))
        if self.fail:
            raise RuntimeError("boom")
        return {"Subnets": self.subnets or []}

    def describe_security_groups(self, Filters):
        self.calls.append(("groups", Filters))
        if self.fail:
            raise RuntimeError("boom")
        return {"SecurityGroups": self.groups or []}


def test_validate_flags_requires_subnet_and_sg_without_cluster_id():
    with pytest.raises(EgressVerificationError):
        EgressVerification(cluster_id="").validate_flags()


def test_validate_flags_cluster_id_optional():
    e = EgressVerification(subnet_id="subnet-a", security_group_id="sg-b")
    assert e.validate_flags() is False


def test_validate_flags_with_cluster_id():
    assert EgressVerification(cluster_id="abc").validate_flags() is True


def test_validate_flags_cluster_id_and_region_exclusive():
    with pytest.raises(EgressVerificationError):
        EgressVerification(cluster_id="abc", region="us-east-1").validate_flags()


def test_generate_input_gcp_unsupported():
    e = EgressVerification(cluster=ClusterInfo(cloud_provider="gcp"))
    with pytest.raises(EgressVerificationError, match="only supports aws"):
        e.generate_input("")


def test_generate_input_unsupported_product():
    e = EgressVerification(cluster=ClusterInfo(cloud_provider="aws", product="ocp"))
    with pytest.raises(EgressVerificationError, match="rosa, osd, and osdtrial"):
        e.generate_input("us-east-2")


def test_generate_input_proxy_requires_cacert_with_trust_bundle():
    cluster = ClusterInfo(
        cloud_provider="aws",
        product="rosa",
        additional_trust_bundle="REDACTED",
        http_proxy="http://my.proxy:80",
        https_proxy="https://my.proxy:443",
    )
    e = EgressVerification(cluster=cluster)
    with pytest.raises(EgressVerificationError, match="trust bundle"):
        e.generate_input("us-east-2")


def test_generate_input_transparent_proxy():
    client = FakeEC2(
        subnets=[{"SubnetId": "subnet-abcd"}], groups=[{"GroupId": "sg-abcd"}]
    )
    cluster = ClusterInfo(
        cloud_provider="aws",
        product="rosa",
        http_proxy="http://my.proxy:80",
        https_proxy="https://my.proxy:443",
    )
    result = EgressVerification(aws_client=client, cluster=cluster).generate_input(
        "us-east-2"
    )
    assert result.subnet_id == "subnet-abcd"
    assert result.security_group_id == "sg-abcd"
    assert result.proxy.http_proxy == "http://my.proxy:80"
    assert result.proxy.https_proxy == "https://my.proxy:443"


def test_generate_input_reads_cacert(tmp_path):
    cert = tmp_path / "cacert.txt"
    cert.write_text("CERTDATA")
    e = EgressVerification(
        subnet_id="subnet-a", security_group_id="sg-b", ca_cert=str(cert), no_tls=True
    )
    result = e.generate_input("us-east-1")
    assert result.proxy.cacert == "CERTDATA"
    assert result.proxy.no_tls is True
    assert (result.subnet_id, result.security_group_id) == ("subnet-a", "sg-b")


def test_generate_input_unsupported_region():
    e = EgressVerification(subnet_id="subnet-a", security_group_id="sg-b")
    with pytest.raises(EgressVerificationError, match="unsupported region"):
        e.generate_input("us-central-1")


def test_security_group_manual_override():
    client = FakeEC2(groups=[{"GroupId": "sg-abcd"}])
    e = EgressVerification(aws_client=client, security_group_id="override")
    assert e.get_security_group_id() == "override"
    assert client.calls == []


def test_security_group_zero_from_aws():
    e = EgressVerification(aws_client=FakeEC2(groups=[]))
    with pytest.raises(EgressVerificationError):
        e.get_security_group_id()


def test_security_group_one_from_aws():
    e = EgressVerification(aws_client=FakeEC2(groups=[{"GroupId": "sg-abcd"}]))
    assert e.get_security_group_id() == "sg-abcd"


def test_security_group_filters_use_infra_id():
    client = FakeEC2(groups=[{"GroupId": "sg-1"}])
    e = EgressVerification(aws_client=client, cluster=ClusterInfo(infra_id="infra-x"))
    e.get_security_group_id()
    _, filters = client.calls[0]
    assert filters == [
        {"Name": "tag:Name", "Values": ["infra-x-master-sg"]},
        {"Name": "tag:kubernetes.io/cluster/infra-x", "Values": ["owned"]},
    ]


def test_security_group_client_error_wrapped():
    e = EgressVerification(aws_client=FakeEC2(fail=True))
    with pytest.raises(EgressVerificationError, match="failed to find master"):
        e.get_security_group_id()


def test_subnet_manual_override():
    assert EgressVerification(subnet_id="override").get_subnet_id() == "override"


def test_subnet_non_privatelink_byovpc_unsupported():
    cluster = ClusterInfo(private_link=False, subnet_ids=["subnet-abcd"])
    with pytest.raises(EgressVerificationError):
        EgressVerification(cluster=cluster).get_subnet_id()


def test_subnet_privatelink_byovpc_picks_first():
    cluster = ClusterInfo(private_link=True, subnet_ids=["subnet-abcd", "subnet-x"])
    assert EgressVerification(cluster=cluster).get_subnet_id() == "subnet-abcd"


def test_subnet_non_byovpc_from_aws():
    client = FakeEC2(subnets=[{"SubnetId": "subnet-abcd"}])
    e = EgressVerification(aws_client=client, cluster=ClusterInfo(infra_id="inf"))
    assert e.get_subnet_id() == "subnet-abcd"
    _, filters = client.calls[0]
    assert filters == [
        {"Name": "tag:kubernetes.io/cluster/inf", "Values": ["owned"]},
        {"Name": "tag-key", "Values": ["kubernetes.io/role/internal-elb"]},
    ]


def test_subnet_non_byovpc_none_in_aws():
    e = EgressVerification(aws_client=FakeEC2(subnets=[]), cluster=ClusterInfo())
    with pytest.raises(EgressVerificationError):
        e.get_subnet_id()


@pytest.mark.parametrize(
    "region, expect_err", [("us-east-2", False), ("us-central-1", True)]
)
def test_default_validate_egress_input(region, expect_err):
    if expect_err:
        with pytest.raises(EgressVerificationError):
            default_validate_egress_input(region)
    else:
        result = default_validate_egress_input(region)
        assert result.region == region


def test_default_validate_egress_input_values():
    result = default_validate_egress_input("us-east-1")
    assert result.instance_type == "t3.micro"
    assert result.timeout == 2.0
    assert result.subnet_id == ""
    assert result.security_group_id == ""
    assert result.tags == {
        "osd-network-verifier": "owned",
        "red-hat-managed": "true",
        "Name": "osd-network-verifier",
    }