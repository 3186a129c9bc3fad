"""Helpers for service logs, organizations, egress checks, packet captures and STS policies of OpenShift Dedicated clusters."""

__version__ = "0.1.0"