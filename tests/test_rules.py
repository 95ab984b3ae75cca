"""Tests for neighbor to rule translation."""

from netpolgen.knownservers import KnownServersFinder
from netpolgen.knownservers.models import KnownServer, KnownServerEntry
from netpolgen.neighborhood.models import LabelSelector, NetworkNeighbor, NetworkPort
from netpolgen.policy.models import IPBlock, NetworkPolicyPort, PolicyRef
from netpolgen.policy.rules import generate_rule, single_ip_block

from conftest import ip_neighbor, pod_neighbor


class TestSingleIPBlock:
    def test_single_ip_block(self):
        assert single_ip_block("192.168.1.1") == IPBlock(cidr="192.168.1.1/32")

    def test_ipv6_also_gets_slash_32(self):
        assert single_ip_block("2001:db8::1") == IPBlock(cidr="2001:db8::1/32")


class TestSelectorNeighbors:
    def test_pod_selector(self, no_known_servers):
        rule, refs = generate_rule(pod_neighbor({"app": "nginx"}, 80), no_known_servers)
        assert len(rule.peers) == 1
        assert rule.peers[0].pod_selector.match_labels == {"app": "nginx"}
        assert rule.ports == [NetworkPolicyPort(protocol="TCP", port=80)]
        assert refs == []

    def test_pod_selector_labels_sanitized(self, no_known_servers):
        neighbor = pod_neighbor({"app.kubernetes.io/instance": "x", "app.kubernetes.io/name": "db"}, 5432)
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert rule.peers[0].pod_selector.match_labels == {"app.kubernetes.io/name": "db"}
        # the observed neighbor keeps its labels
        assert "app.kubernetes.io/instance" in neighbor.pod_selector.match_labels

    def test_namespace_selector_joins_pod_selector(self, no_known_servers):
        neighbor = pod_neighbor({"app": "dns"}, 53)
        neighbor.namespace_selector = LabelSelector(match_labels={"ns": "kube-system"})
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert len(rule.peers) == 1
        assert rule.peers[0].pod_selector.match_labels == {"app": "dns"}
        assert rule.peers[0].namespace_selector.match_labels == {"ns": "kube-system"}

    def test_namespace_selector_alone(self, no_known_servers):
        neighbor = NetworkNeighbor(namespace_selector=LabelSelector(match_labels={"ns": "a"}))
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert len(rule.peers) == 1
        assert rule.peers[0].pod_selector is None
        assert rule.peers[0].namespace_selector.match_labels == {"ns": "a"}


class TestIPNeighbors:
    def test_known_server(self, known_servers):
        rule, refs = generate_rule(ip_neighbor("172.17.0.2", 80), known_servers)
        assert [p.ip_block.cidr for p in rule.peers] == ["172.17.0.0/16"]
        assert refs == [PolicyRef(ip_block="172.17.0.0/16", original_ip="172.17.0.2", name="test")]

    def test_known_server_with_dns(self, known_servers):
        _, refs = generate_rule(ip_neighbor("172.17.0.2", 80, dns="a.example.com"), known_servers)
        assert refs[0].dns == "a.example.com"

    def test_every_matching_known_server(self, overlapping_known_servers):
        rule, refs = generate_rule(ip_neighbor("192.168.1.200", 443), overlapping_known_servers)
        assert [p.ip_block.cidr for p in rule.peers] == ["192.168.1.128/25", "192.168.1.0/24"]
        assert [r.server for r in refs] == ["server5", "server1"]
        assert all(r.original_ip == "192.168.1.200" for r in refs)

    def test_unknown_ip(self, no_known_servers):
        rule, refs = generate_rule(ip_neighbor("154.53.46.32", 443), no_known_servers)
        assert [p.ip_block.cidr for p in rule.peers] == ["154.53.46.32/32"]
        assert refs == []

    def test_unknown_ip_with_dns(self, no_known_servers):
        _, refs = generate_rule(ip_neighbor("154.53.46.32", 443, dns="x.example.com"), no_known_servers)
        assert refs == [PolicyRef(ip_block="154.53.46.32/32", original_ip="154.53.46.32", dns="x.example.com")]

    def test_dns_names_fallback(self, no_known_servers):
        neighbor = ip_neighbor("1.2.3.4", 443)
        neighbor.dns_names = ["first.example.com", "second.example.com"]
        _, refs = generate_rule(neighbor, no_known_servers)
        assert refs[0].dns == "first.example.com"

    def test_unparseable_ip_falls_back_to_host_block(self, known_servers):
        rule, refs = generate_rule(ip_neighbor("garbage", 80), known_servers)
        assert rule.peers[0].ip_block.cidr == "garbage/32"
        assert refs == []


class TestPorts:
    def test_protocol_uppercased(self, no_known_servers):
        neighbor = NetworkNeighbor(
            ip_address="1.1.1.1",
            ports=[NetworkPort(name="udp-53", protocol="udp", port=53)],
        )
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert rule.ports == [NetworkPolicyPort(protocol="UDP", port=53)]

    def test_port_order_kept(self, no_known_servers):
        rule, _ = generate_rule(ip_neighbor("1.1.1.1", 443, 80), no_known_servers)
        assert [p.port for p in rule.ports] == [443, 80]

    def test_missing_port_number(self, no_known_servers):
        neighbor = NetworkNeighbor(ip_address="1.1.1.1", ports=[NetworkPort(protocol="TCP")])
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert rule.ports == [NetworkPolicyPort(protocol="TCP", port=None)]

    def test_no_peers(self, no_known_servers):
        rule, refs = generate_rule(NetworkNeighbor(ports=[NetworkPort(protocol="TCP", port=80)]), no_known_servers)
        assert rule.peers == []
        assert len(rule.ports) == 1
        assert refs == []

    def test_empty_protocol_defaults_to_tcp(self, no_known_servers):
        neighbor = NetworkNeighbor(ip_address="1.1.1.1", ports=[NetworkPort(protocol=None, port=80)])
        rule, _ = generate_rule(neighbor, no_known_servers)
        assert rule.ports == [NetworkPolicyPort(protocol="TCP", port=80)]
