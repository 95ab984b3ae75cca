"""Shared test fixtures for NetPolGen."""

from datetime import datetime, timezone

import pytest

from netpolgen.knownservers import KnownServersFinder
from netpolgen.knownservers.models import KnownServer, KnownServerEntry
from netpolgen.neighborhood.models import (
    LabelSelector,
    NetworkNeighbor,
    NetworkNeighborhood,
    NetworkNeighborhoodContainer,
    NetworkPort,
)


def tcp(port):
    return NetworkPort(name=f"TCP-{port}", protocol="TCP", port=port)


def ip_neighbor(ip, *ports, dns=""):
    return NetworkNeighbor(ip_address=ip, dns=dns, ports=[tcp(p) for p in ports])


def pod_neighbor(labels, *ports):
    return NetworkNeighbor(
        pod_selector=LabelSelector(match_labels=dict(labels)),
        ports=[tcp(p) for p in ports],
    )


def make_neighborhood(ingress=None, egress=None, status="ready", labels=None, **kwargs):
    if labels is None:
        labels = {
            "kubescape.io/workload-kind": "Deployment",
            "kubescape.io/workload-name": "nginx",
        }
    return NetworkNeighborhood(
        name="deployment-nginx",
        namespace="kubescape",
        annotations={"kubescape.io/status": status} if status else {},
        labels=labels,
        match_labels={"app": "nginx"},
        containers=[NetworkNeighborhoodContainer(
            name="nginx",
            ingress=list(ingress or []),
            egress=list(egress or []),
        )],
        **kwargs,
    )


@pytest.fixture
def timestamp():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def no_known_servers():
    return KnownServersFinder()


@pytest.fixture
def known_servers():
    return KnownServersFinder([
        KnownServer(name="registry", entries=[
            KnownServerEntry(ip_block="172.17.0.0/16", server="", name="test"),
        ]),
    ])


@pytest.fixture
def overlapping_known_servers():
    return KnownServersFinder([
        KnownServer(entries=[
            KnownServerEntry(server="server1", name="name1", ip_block="192.168.1.0/24"),
            KnownServerEntry(server="server2", name="name2", ip_block="10.0.0.0/8"),
            KnownServerEntry(server="server3", name="name3", ip_block=""),
            KnownServerEntry(server="server4", name="name4", ip_block="invalid"),
            KnownServerEntry(server="server5", name="name5", ip_block="192.168.1.128/25"),
        ]),
    ])
