"""
NetPolGen: Network Policy Generator

Compiles the network neighbors observed for a workload into a minimal,
deduplicated Kubernetes NetworkPolicy with a provenance trail.
"""

__version__ = "0.1.0"
