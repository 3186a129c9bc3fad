"""Preparing the input of an egress verification run for a cluster's VPC."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

_log = logging.getLogger(__name__)

NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY = "kubernetes.io/role/internal-elb"
DEFAULT_INSTANCE_TYPE = "t3.micro"
DEFAULT_TIMEOUT_SECONDS = 2.0
SUPPORTED_PRODUCTS = ("rosa", "osd", "osdtrial")

SUPPORTED_REGIONS = frozenset(
    {
        "af-south-1",
        "ap-east-1",
        "ap-northeast-1",
        "ap-northeast-2",
        "ap-northeast-3",
        "ap-south-1",
        "ap-southeast-1",
        "ap-southeast-2",
        "ap-southeast-3",
        "ca-central-1",
        "eu-central-1",
        "eu-north-1",
        "eu-south-1",
        "eu-west-1",
        "eu-west-2",
        "eu-west-3",
        "me-south-1",
        "sa-east-1",
        "us-east-1",
        "us-east-2",
        "us-west-1",
        "us-west-2",
    }
)


class EgressVerificationError(Exception):
    """The egress verification could not be prepared."""


@dataclass
class ProxyConfig:
    """Proxy settings used by the verifier's HTTPS requests."""

    http_proxy: str = ""
    https_proxy: str = ""
    cacert: str = ""
    no_tls: bool = False


@dataclass
class ValidateEgressInput:
    """Everything the egress verifier needs for one run."""

    region: str = ""
    subnet_id: str = ""
    security_group_id: str = ""
    instance_type: str = DEFAULT_INSTANCE_TYPE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class ClusterInfo:
    """The parts of a cluster's description that the verification uses."""

    id: str = ""
    cloud_provider: str = ""
    product: str = ""
    infra_id: str = ""
    additional_trust_bundle: str = ""
    http_proxy: str = ""
    https_proxy: str = ""
    subnet_ids: list[str] = field(default_factory=list)
    private_link: bool = False

    @property
    def has_proxy(self) -> bool:
        """Tell whether a cluster-wide proxy is configured."""
        return bool(self.http_proxy or self.https_proxy)


def default_validate_egress_input(region: str) -> ValidateEgressInput:
    """Return the opinionated default input for a region."""
    if region not in SUPPORTED_REGIONS:
        raise EgressVerificationError(f"unsupported region: {region}")
    return ValidateEgressInput(
        region=region,
        tags={
            "osd-network-verifier": "owned",
            "red-hat-managed": "true",
            "Name": "osd-network-verifier",
        },
    )


def _cluster_tag_filter(infra_id: str) -> dict[str, Any]:
    return {"Name": f"tag:kubernetes.io/cluster/{infra_id}", "Values": ["owned"]}


@dataclass
class EgressVerification:
    """Settings of one egress verification and the lookups that complete them.

    ``aws_client`` is an EC2 client offering ``describe_subnets`` and
    ``describe_security_groups`` with a ``Filters`` keyword argument.
    """

    aws_client: Any = None
    cluster: ClusterInfo | None = None
    cluster_id: str = ""
    region: str = ""
    subnet_id: str = ""
    security_group_id: str = ""
    debug: bool = False
    ca_cert: str = ""
    no_tls: bool = False

    def validate_flags(self) -> bool:
        """Check the flag combination.

        Return True when the cluster is to be looked up by its id, False when
        the subnet and security group are given by hand.
        """
        if self.cluster_id:
            if self.region:
                raise EgressVerificationError(
                    "flags --cluster-id and --region cannot be set at the same time"
                )
            return True
        if not self.subnet_id or not self.security_group_id:
            raise EgressVerificationError(
                "--subnet-id and --security-group are required when "
                "--cluster-id is not specified"
            )
        _log.info(
            "[WARNING] no cluster-id specified, there is reduced validation around "
            "the security group, subnet, and proxy, causing inaccurate results"
        )
        return False

    def generate_input(self, region: str) -> ValidateEgressInput:
        """Build the verifier input, detecting what it can from the cluster."""
        cluster = self.cluster
        if cluster is not None:
            if cluster.cloud_provider != "aws":
                raise EgressVerificationError(
                    f"only supports aws, got {cluster.cloud_provider}"
                )
            if cluster.product not in SUPPORTED_PRODUCTS:
                raise EgressVerificationError(
                    f"only supports rosa, osd, and osdtrial, got {cluster.product}"
                )

        try:
            result = default_validate_egress_input(region)
        except EgressVerificationError as err:
            raise EgressVerificationError(
                f"failed to assemble validate egress input: {err}"
            ) from err

        result.proxy.no_tls = self.no_tls
        if self.ca_cert:
            try:
                with open(self.ca_cert, encoding="utf-8") as handle:
                    result.proxy.cacert = handle.read()
            except OSError as err:
                raise EgressVerificationError(
                    f"cannot read {self.ca_cert}: {err}"
                ) from err

        if cluster is not None and cluster.has_proxy:
            result.proxy.http_proxy = cluster.http_proxy
            result.proxy.https_proxy = cluster.https_proxy
            # The bundle is redacted, but its presence means --cacert is needed.
            if cluster.additional_trust_bundle and not self.ca_cert:
                raise EgressVerificationError(
                    f"{self.cluster_id} has an additional trust bundle configured, "
                    "but no --cacert supplied"
                )

        result.subnet_id = self.get_subnet_id()
        result.security_group_id = self.get_security_group_id()
        _log.info("running with config: %s", result)
        return result

    def _require_cluster(self) -> ClusterInfo:
        if self.cluster is None:
            raise EgressVerificationError(
                "no cluster information available, use --cluster-id or the "
                "--subnet-id and --security-group flags"
            )
        return self.cluster

    def _require_client(self) -> Any:
        if self.aws_client is None:
            raise EgressVerificationError("no AWS client configured")
        return self.aws_client

    def get_subnet_id(self) -> str:
        """Return the override subnet or a private subnet of the cluster."""
        if self.subnet_id:
            _log.info("using manually specified subnet-id: %s", self.subnet_id)
            return self.subnet_id

        cluster = self._require_cluster()
        if not cluster.subnet_ids:
            infra_id = cluster.infra_id
            _log.info(
                "searching for subnets by tags: kubernetes.io/cluster/%s=owned and %s=",
                infra_id,
                NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY,
            )
            client = self._require_client()
            try:
                resp = client.describe_subnets(
                    Filters=[
                        _cluster_tag_filter(infra_id),
                        {
                            "Name": "tag-key",
                            "Values": [NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY],
                        },
                    ]
                )
            except Exception as err:
                raise EgressVerificationError(
                    f"failed to find private subnets for {infra_id}: {err}"
                ) from err
            subnets = resp.get("Subnets") or []
            if not subnets:
                raise EgressVerificationError(
                    f"found 0 subnets with kubernetes.io/cluster/{infra_id}=owned and "
                    f"{NON_BYOVPC_PRIVATE_SUBNET_TAG_KEY}, consider the --subnet-id flag"
                )
            subnet = subnets[0]["SubnetId"]
            _log.info("using subnet-id: %s", subnet)
            return subnet

        if cluster.private_link:
            subnet = cluster.subnet_ids[0]
            _log.info(
                "detected BYOVPC PrivateLink cluster, using first subnet from OCM: %s",
                subnet,
            )
            return subnet

        raise EgressVerificationError(
            "unable to determine which non-PrivateLink BYOVPC subnets are private yet, "
            "please check manually and provide the --subnet-id flag"
        )

    def get_security_group_id(self) -> str:
        """Return the override security group or the cluster's master one."""
        if self.security_group_id:
            _log.info(
                "using manually specified security-group-id: %s",
                self.security_group_id,
            )
            return self.security_group_id

        infra_id = self.cluster.infra_id if self.cluster is not None else ""
        _log.info(
            "searching for security group by tags: kubernetes.io/cluster/%s=owned "
            "and Name=%s-master-sg",
            infra_id,
            infra_id,
        )
        client = self._require_client()
        try:
            resp = client.describe_security_groups(
                Filters=[
                    {"Name": "tag:Name", "Values": [f"{infra_id}-master-sg"]},
                    _cluster_tag_filter(infra_id),
                ]
            )
        except Exception as err:
            raise EgressVerificationError(
                f"failed to find master security group for {infra_id}: {err}"
            ) from err
        groups = resp.get("SecurityGroups") or []
        if not groups:
            raise EgressVerificationError(
                "failed to find any master security groups by tag: "
                f"kubernetes.io/cluster/{infra_id}=owned and "
                f"Name=={infra_id}-master-sg"
            )
        group = groups[0]["GroupId"]
        _log.info("using security-group-id: %s", group)
        return group