"""
NetPolGen Command Line Interface.

Commands: generate, lookup, demo, serve
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

import click
import yaml

from . import __version__
from .config import GeneratorConfig, load_config
from .knownservers import KnownServersFinder
from .knownservers.models import known_servers_from_document
from .neighborhood import NetworkNeighborhood, network_neighborhoods_from_document
from .policy import PolicyGenerationError, generate_network_policies, generate_network_policy
from .policy.models import parse_timestamp

logger = logging.getLogger(__name__)


SAMPLE_NEIGHBORHOOD: dict[str, Any] = {
    "kind": "NetworkNeighborhood",
    "metadata": {
        "name": "deployment-web",
        "namespace": "shop",
        "annotations": {"kubescape.io/status": "completed"},
        "labels": {
            "kubescape.io/workload-kind": "Deployment",
            "kubescape.io/workload-name": "web",
            "kubescape.io/instance-template-hash": "5d8f7c9b4",
        },
    },
    "spec": {
        "matchLabels": {"app": "web"},
        "containers": [
            {
                "name": "web",
                "ingress": [
                    {
                        "identifier": "frontend",
                        "type": "internal",
                        "podSelector": {
                            "matchLabels": {
                                "app": "frontend",
                                "pod-template-hash": "7b9c6d",
                            },
                        },
                        "ports": [{"name": "TCP-8080", "protocol": "TCP", "port": 8080}],
                    },
                ],
                "egress": [
                    {
                        "identifier": "cdn-a",
                        "type": "external",
                        "ipAddress": "151.101.1.69",
                        "dns": "cdn.example.com.",
                        "ports": [{"name": "TCP-443", "protocol": "TCP", "port": 443}],
                    },
                    {
                        "identifier": "payments",
                        "type": "external",
                        "ipAddress": "52.94.236.248",
                        "ports": [{"name": "TCP-443", "protocol": "TCP", "port": 443}],
                    },
                    {
                        "identifier": "kube-dns",
                        "type": "internal",
                        "podSelector": {"matchLabels": {"k8s-app": "kube-dns"}},
                        "namespaceSelector": {
                            "matchLabels": {"kubernetes.io/metadata.name": "kube-system"},
                        },
                        "ports": [{"name": "UDP-53", "protocol": "udp", "port": 53}],
                    },
                ],
            },
            {
                "name": "sidecar",
                "egress": [
                    {
                        "identifier": "cdn-a",
                        "type": "external",
                        "ipAddress": "151.101.1.69",
                        "dns": "cdn.example.com.",
                        "ports": [{"name": "TCP-443", "protocol": "TCP", "port": 443}],
                    },
                ],
            },
        ],
    },
}

SAMPLE_KNOWN_SERVERS: list[dict[str, Any]] = [
    {
        "kind": "KnownServer",
        "metadata": {"name": "cloud-providers"},
        "spec": [
            {"ipBlock": "52.94.0.0/16", "server": "aws", "name": "amazon-dynamodb"},
        ],
    },
]


def _load_document(path: str) -> Any:
    with open(path) as f:
        return yaml.safe_load(f)


def _load_finder(path: str | None) -> KnownServersFinder:
    if not path:
        return KnownServersFinder()
    return KnownServersFinder(known_servers_from_document(_load_document(path)))


def _dump(data: dict[str, Any], output: str) -> str:
    if output == "json":
        return json.dumps(data, indent=2)
    return yaml.dump(data, default_flow_style=False, sort_keys=False)


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default="WARNING",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging verbosity")
def cli(log_level: str):
    """NetPolGen: compile observed network neighbors into network policies"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("neighborhood_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--known-servers", "known_servers_file", default=None,
              type=click.Path(exists=True, dir_okay=False), help="YAML/JSON known servers file")
@click.option("--config", "config_file", default=None,
              type=click.Path(exists=True, dir_okay=False), help="YAML generator config")
@click.option("--output", default="yaml", type=click.Choice(["yaml", "json"]), help="Output format")
@click.option("--timestamp", default=None, help="Creation timestamp (ISO 8601), defaults to now")
def generate(neighborhood_file: str, known_servers_file: str | None, config_file: str | None,
             output: str, timestamp: str | None):
    """
    Generate network policies from a network neighborhood file.

    A single neighborhood yields one policy. A list or an `items` document
    yields a policy list, skipping neighborhoods that are not ready yet.
    """
    try:
        config = load_config(config_file) if config_file else GeneratorConfig()
        document = _load_document(neighborhood_file)
        nns = network_neighborhoods_from_document(document)
        finder = _load_finder(known_servers_file)
        ts = parse_timestamp(timestamp) if timestamp else datetime.now(timezone.utc)
    except (AttributeError, KeyError, TypeError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"invalid input: {e}")

    try:
        if isinstance(document, dict) and "items" not in document:
            result = generate_network_policy(nns[0], finder, ts, config)
        else:
            result = generate_network_policies(nns, finder, ts, config)
    except PolicyGenerationError as e:
        raise click.ClickException(str(e))

    click.echo(_dump(result.to_dict(), output))


@cli.command()
@click.argument("ip")
@click.option("--known-servers", "known_servers_file", required=True,
              type=click.Path(exists=True, dir_okay=False), help="YAML/JSON known servers file")
def lookup(ip: str, known_servers_file: str):
    """Show the known servers containing an IP."""
    finder = _load_finder(known_servers_file)
    entries, found = finder.contains(ip)
    if not found:
        click.echo(f"{ip}: no known server (policy would use {ip}/32)")
        return
    click.echo(f"{ip}: {len(entries)} known server(s)")
    for entry in entries:
        click.echo(f"  {entry.ip_block:20s} name={entry.name} server={entry.server}")


@cli.command()
@click.option("--output", default="yaml", type=click.Choice(["yaml", "json"]), help="Output format")
def demo(output: str):
    """Compile a built-in sample neighborhood."""
    nn = NetworkNeighborhood.from_dict(SAMPLE_NEIGHBORHOOD)
    finder = KnownServersFinder(known_servers_from_document(SAMPLE_KNOWN_SERVERS))
    policy = generate_network_policy(nn, finder, datetime.now(timezone.utc))

    spec = policy.spec.spec
    click.echo(f"[+] {policy.namespace}/{policy.name}: {len(spec.ingress)} ingress rules, "
               f"{len(spec.egress)} egress rules, {len(policy.policies_ref)} policy refs")
    click.echo(_dump(policy.to_dict(), output))


@cli.command()
@click.option("--host", default="127.0.0.1", help="API host")
@click.option("--port", default=5000, help="API port")
@click.option("--known-servers", "known_servers_file", default=None,
              type=click.Path(exists=True, dir_okay=False), help="YAML/JSON known servers file")
@click.option("--config", "config_file", default=None,
              type=click.Path(exists=True, dir_okay=False), help="YAML generator config")
def serve(host: str, port: int, known_servers_file: str | None, config_file: str | None):
    """Run the REST API."""
    from .api import create_app

    config = load_config(config_file) if config_file else GeneratorConfig()
    finder = _load_finder(known_servers_file)
    click.echo(f"[*] Starting NetPolGen API on {host}:{port} ({len(finder)} known server entries)")
    app = create_app(known_servers=finder, config=config)
    app.run(host=host, port=port)


def main():
    cli()


if __name__ == "__main__":
    main()
