"""Running a time-boxed packet capture on cluster nodes and collecting the files."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

_log = logging.getLogger(__name__)

PACKET_CAPTURE_IMAGE = "quay.io/app-sre/srep-network-toolbox:latest"
PACKET_CAPTURE_NAME = "sre-packet-capture"
PACKET_CAPTURE_NAMESPACE = "default"
OUTPUT_DIR = "capture-output"
NODE_LABEL_KEY = "node-role.kubernetes.io/worker"
NODE_LABEL_VALUE = ""
PACKET_CAPTURE_DURATION_SEC = 60

POLL_INTERVAL_SEC = 10.0
POLL_TIMEOUT_SEC = 600.0

GENEVE_INTERFACE = "genev_sys_6081"
VXLAN_INTERFACE = "vxlan_sys_4789"

_CAPTURE_MOUNT = "/tmp/capture-output"
_CAPTURE_FILE = f"{_CAPTURE_MOUNT}/capture.pcap"
_VOLUME_NAME = "capture-output"


class NotFoundError(LookupError):
    """The requested cluster object does not exist."""


class PacketCaptureError(Exception):
    """A packet capture step failed."""


class KubeClient(Protocol):
    """The cluster operations a packet capture needs, on plain manifests."""

    def get(self, kind: str, name: str, namespace: str) -> Mapping[str, Any]:
        """Return an object or raise NotFoundError."""

    def create(self, obj: Mapping[str, Any]) -> None:
        """Create an object."""

    def delete(self, obj: Mapping[str, Any]) -> None:
        """Delete an object."""

    def list(
        self, kind: str, namespace: str, labels: Mapping[str, str]
    ) -> Sequence[Mapping[str, Any]]:
        """Return the objects of a kind matching the labels."""


@dataclass
class PacketCaptureOptions:
    """Settings of one packet capture."""

    name: str = PACKET_CAPTURE_NAME
    namespace: str = PACKET_CAPTURE_NAMESPACE
    node_label_key: str = NODE_LABEL_KEY
    node_label_value: str = NODE_LABEL_VALUE
    duration: int = PACKET_CAPTURE_DURATION_SEC
    single_pod: bool = False
    start_time: datetime | None = None

    def complete(self) -> PacketCaptureOptions:
        """Fill in what was left unset; the start time defaults to now."""
        if self.start_time is None:
            self.start_time = datetime.now(timezone.utc)
        return self


def capture_command(duration: int, interface: str) -> list[str]:
    """Return the init container's command that captures for a while."""
    return [
        "/bin/bash",
        "-c",
        f"tcpdump -G {duration} -W 1 -w {_CAPTURE_FILE} -i {interface} -nn -s0; sync",
    ]


def _container(name: str, command: list[str]) -> dict[str, Any]:
    return {
        "name": name,
        "image": PACKET_CAPTURE_IMAGE,
        "imagePullPolicy": "IfNotPresent",
        "command": command,
        "securityContext": {"privileged": True},
        "volumeMounts": [
            {"name": _VOLUME_NAME, "mountPath": _CAPTURE_MOUNT, "readOnly": False}
        ],
    }


def _pod_spec(options: PacketCaptureOptions, interface: str) -> dict[str, Any]:
    return {
        "nodeSelector": {options.node_label_key: options.node_label_value},
        "tolerations": [
            {
                "effect": "NoSchedule",
                "key": options.node_label_key,
                "operator": "Exists",
            }
        ],
        "volumes": [{"name": _VOLUME_NAME, "emptyDir": {}}],
        "hostNetwork": True,
        "initContainers": [
            _container("init-capture", capture_command(options.duration, interface))
        ],
        "containers": [
            _container(
                "copy", ["/bin/bash", "-c", "trap : TERM INT; sleep infinity & wait"]
            )
        ],
    }


def desired_daemonset(options: PacketCaptureOptions, interface: str) -> dict[str, Any]:
    """Return the daemonset manifest that runs the capture on every chosen node."""
    labels = {"app": options.name}
    return {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {"name": options.name, "namespace": options.namespace},
        "spec": {
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": _pod_spec(options, interface),
            },
        },
    }


def desired_pod(options: PacketCaptureOptions, interface: str) -> dict[str, Any]:
    """Return the manifest of a single capture pod."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": options.name,
            "namespace": options.namespace,
            "labels": {"app": options.name},
        },
        "spec": _pod_spec(options, interface),
    }


def capture_file_name(node_name: str, start_time: datetime) -> str:
    """Return the local file name of a node's capture."""
    stamp = start_time.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S")
    return f"{node_name}-{stamp}.pcap"


def _run_command(argv: Sequence[str]) -> tuple[int, str]:
    proc = subprocess.run(
        list(argv),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    output = proc.stdout.decode("utf-8", errors="replace")
    sys.stdout.write(output)
    return proc.returncode, output


def _meta(obj: Mapping[str, Any]) -> tuple[str, str]:
    metadata = obj.get("metadata") or {}
    return metadata.get("namespace", ""), metadata.get("name", "")


@dataclass
class PacketCapture:
    """A packet capture run against a cluster through a Kubernetes client."""

    options: PacketCaptureOptions
    kube: Any
    output_dir: str = OUTPUT_DIR
    interval: float = POLL_INTERVAL_SEC
    timeout: float = POLL_TIMEOUT_SEC
    runner: Callable[[Sequence[str]], tuple[int, str]] = _run_command
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic
    capture_interface: str = field(default="", init=False)

    def set_capture_interface(self) -> str:
        """Pick the tunnel interface from the cluster's network type."""
        try:
            ds = self.kube.get("DaemonSet", "ovnkube-master", "openshift-ovn-kubernetes")
        except NotFoundError:
            ds = {}
        except Exception as err:
            raise PacketCaptureError(
                f"failed to determine the network type: {err}"
            ) from err
        scheduled = (ds.get("status") or {}).get("desiredNumberScheduled", 0) or 0
        self.capture_interface = GENEVE_INTERFACE if scheduled > 0 else VXLAN_INTERFACE
        return self.capture_interface

    def _exists(self, kind: str) -> bool:
        try:
            self.kube.get(kind, self.options.name, self.options.namespace)
        except NotFoundError:
            return False
        return True

    def _ensure(self, kind: str, label: str, desired: dict[str, Any]) -> dict[str, Any]:
        if self._exists(kind):
            _log.info("Already have packet-capture %s", label)
            raise PacketCaptureError(
                f"{self.options.name} {label} already exists in the "
                f"{self.options.namespace} namespace"
            )
        try:
            self.kube.create(desired)
        except Exception as err:
            namespace, name = _meta(desired)
            raise PacketCaptureError(
                f"failed to create {label} {namespace}/{name}: {err}"
            ) from err
        _log.info("Successfully ensured packet capture %s", label)
        return desired

    def _delete(self, label: str, obj: Mapping[str, Any]) -> None:
        try:
            self.kube.delete(obj)
        except Exception as err:
            namespace, name = _meta(obj)
            raise PacketCaptureError(
                f"failed to delete {label} {namespace}/{name}: {err}"
            ) from err

    def ensure_daemonset(self) -> dict[str, Any]:
        """Create the capture daemonset; fail if one already exists."""
        desired = desired_daemonset(self.options, self.capture_interface)
        return self._ensure("DaemonSet", "daemonset", desired)

    def ensure_pod(self) -> dict[str, Any]:
        """Create the single capture pod; fail if one already exists."""
        desired = desired_pod(self.options, self.capture_interface)
        return self._ensure("Pod", "Pod", desired)

    def daemonset_ready(self, name: str, namespace: str) -> bool:
        """Tell whether every scheduled daemonset pod is ready and available."""
        status = self.kube.get("DaemonSet", name, namespace).get("status") or {}
        ready = status.get("numberReady", 0) or 0
        available = status.get("numberAvailable", 0) or 0
        desired = status.get("desiredNumberScheduled", 0) or 0
        return ready > 0 and available == ready and ready == desired

    def pod_running(self, name: str, namespace: str) -> bool:
        """Tell whether the pod is in the Running phase."""
        status = self.kube.get("Pod", name, namespace).get("status") or {}
        return status.get("phase") == "Running"

    def _container_running(self, name: str, namespace: str) -> bool:
        status = self.kube.get("Pod", name, namespace).get("status") or {}
        statuses = status.get("containerStatuses") or []
        if not statuses:
            return False
        return (statuses[0].get("state") or {}).get("running") is not None

    def _wait(self, condition: Callable[[], bool]) -> None:
        deadline = self.clock() + self.timeout
        while True:
            if condition():
                return
            if self.clock() >= deadline:
                raise PacketCaptureError("timed out waiting for the condition")
            self.sleep(self.interval)

    def _copy_from_pod(self, pod: Mapping[str, Any]) -> str:
        os.makedirs(self.output_dir, mode=0o750, exist_ok=True)
        namespace, name = _meta(pod)
        node_name = (pod.get("spec") or {}).get("nodeName", "")
        start = self.options.start_time or datetime.now(timezone.utc)
        destination = f"{self.output_dir}/{capture_file_name(node_name, start)}"
        code, output = self.runner(
            ["oc", "cp", f"{namespace}/{name}:{_CAPTURE_FILE}", destination]
        )
        if code != 0:
            _log.info("%s", output)
            raise PacketCaptureError(
                f"copying from {namespace}/{name} failed with exit status {code}"
            )
        return destination

    def copy_files(self) -> list[str]:
        """Copy the capture from every started capture pod; return local paths."""
        pods = self.kube.list(
            "Pod", self.options.namespace, {"app": self.options.name}
        )
        copied = []
        for pod in pods:
            if not (pod.get("status") or {}).get("containerStatuses"):
                continue
            namespace, name = _meta(pod)
            self._wait(lambda: self._container_running(name, namespace))
            _log.info("Copying files from %s", name)
            copied.append(self._copy_from_pod(pod))
        return copied

    def run(self) -> list[str]:
        """Run the whole capture and return the paths of the copied files."""
        self.options.complete()
        _log.info("Confirming the interface for capturing")
        self.set_capture_interface()
        namespace, name = self.options.namespace, self.options.name
        if self.options.single_pod:
            _log.info("Ensuring Packet Capture Pod")
            obj = self.ensure_pod()
            _log.info("Waiting For Packet Capture Pod")
            self._wait(lambda: self.pod_running(name, namespace))
            label = "Pod"
        else:
            _log.info("Ensuring Packet Capture Daemonset")
            obj = self.ensure_daemonset()
            _log.info("Waiting For Packet Capture Daemonset")
            self._wait(lambda: self.daemonset_ready(name, namespace))
            label = "daemonset"
        _log.info("Copying Files From Packet Capture Pods")
        copied = self.copy_files()
        _log.info("Deleting Packet Capture %s", label)
        self._delete(label, obj)
        return copied