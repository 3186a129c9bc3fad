# osdkit

`osdkit` gathers the everyday logic used by engineers who look after
OpenShift Dedicated and ROSA clusters into one Python package, plus a small
command-line tool for STS policy files.

## What is in it

- `osdkit.servicelog_models` – the `Message` template (`replace_with_flag`,
  `search_flag`, `find_leftovers`, `to_dict`), the API reply types
  `GoodReply`, `BadReply`, `ServiceLogShort`, `ClusterListGoodReply`,
  `ServiceLogShortList`, `ClustersFile`, and the parsers `parse_message`,
  `parse_clusters_file`, `parse_good_reply`, `parse_bad_reply`.
- `osdkit.servicelog_post` – preparing a service log post:
  `parse_user_parameters`, `access_file` (local file or URL),
  `read_filter_files`, `find_leftovers`, `check_leftovers`, `replace_flags`,
  `internal_message_template`, `load_template`, `build_post_body`,
  `validate_good_response`, `validate_bad_response`, and `PostResults`, which
  records per-cluster outcomes (`check`, `mark_interrupted`, `summary`).
  Problems raise `ServiceLogError`.
- `osdkit.servicelog_list` – `check_list_args` and `list_search_query` for
  listing a cluster's service logs.
- `osdkit.org` – organization searches: `check_org_id`, `search_type`,
  `search_api_path`, `search_query`, `check_roles`, `format_roles`,
  `active_subscriptions`, `customers_query`, `labels_api_path`,
  `describe_api_path`, `clusters_query`, and the records `Organization`,
  `Subscription`, `Label`, `Customer`.
- `osdkit.egress` – `EgressVerification` works out the subnet, security group
  and proxy settings for an egress check (`validate_flags`, `generate_input`,
  `get_subnet_id`, `get_security_group_id`). Give it a `ClusterInfo` and an
  EC2 client object of your own that offers `describe_subnets` and
  `describe_security_groups`. `default_validate_egress_input` fails for
  unsupported regions.
- `osdkit.packet_capture` – `desired_daemonset` and `desired_pod` build the
  manifests of a privileged `tcpdump` capture; `PacketCapture` runs the whole
  capture through a Kubernetes client object you supply (`get`, `create`,
  `delete`, `list`) and copies the files back with `oc cp`.
- `osdkit.sts` – `policy` extracts the AWS credentials requests of a release
  with `oc adm release extract` into `/tmp/crs-<version>`; `policy_diff` does
  so for two releases and returns their `diff`.
- `osdkit.federatedrole` – `ApplyOptions` checks that exactly one of a URL or
  a file is given (`complete`) and reads the YAML or JSON document
  (`read_source`).
- `osdkit.release_asset` – `asset_os`, `asset_arch`, `is_newer` and
  `extract_member` for picking and unpacking a release archive.
- `osdkit.support` – the `LimitedSupport` template and its reply types.
- `osdkit.fileutils` (`folder_exists`, `file_exists`, `create_file`),
  `osdkit.netutils` (`is_online`, `is_valid_url`, `curl_this`) and
  `osdkit.output` (`render_response`, `print_response` for `json`, `yaml` or
  plain text).

## Installation

```
pip install .
```

Python 3.10 or later is required. The STS and packet-capture features call
the `oc` program, and `policy_diff` calls `diff`; both must be on your `PATH`.

## Command line

```
osdkit --help
osdkit options
osdkit sts policy 4.12.0
osdkit sts policy-diff 4.11.0 4.12.0
```

`options` prints the global flags (`-o/--output`, `-S/--skip-version-check`).
The `sts` sub-commands validate the versions as semantic versions and exit
with status 1 on error.

## Library use

Fill in a service log template and build the body for one cluster:

```python
from osdkit.servicelog_models import parse_message
from osdkit.servicelog_post import build_post_body, check_leftovers, replace_flags

message = parse_message({
    "severity": "Info",
    "service_name": "SREManualAction",
    "summary": "Maintenance on ${CLUSTER_NAME}",
    "description": "Work will start soon.",
})
filters = replace_flags(message, "", "${CLUSTER_NAME}", "demo")
check_leftovers(message, filters, ["${CLUSTER_UUID}"])
body = build_post_body(message, "cluster-uuid", "cluster-id", False, None)
```

Build the search query used to look up organizations by user name:

```python
from osdkit.org import search_query

print(search_query("jdoe", "", part_match=True))
# search=username like '%jdoe%'
```

Render a response as YAML:

```python
from osdkit.output import render_response

print(render_response("yaml", {"items": []}))
```

## What it does not do

The package does not log in to or talk to the cluster management, accounts
or service log APIs itself: it builds queries, paths and request bodies and
checks replies, but sending them is up to you. It does not create AWS or
Kubernetes clients, does not run the egress verifier, does not update IAM
policies for federated roles, and has no self-upgrade or version command.
The command line covers only `options` and the `sts` commands.

## Running the tests

```
pip install ".[test]"
pytest
```