"""Observed network neighborhood models for NetPolGen."""

from .models import (
    LabelSelector,
    LabelSelectorRequirement,
    NetworkNeighbor,
    NetworkNeighborhood,
    NetworkNeighborhoodContainer,
    NetworkPort,
    network_neighborhoods_from_document,
)

__all__ = [
    "LabelSelector",
    "LabelSelectorRequirement",
    "NetworkNeighbor",
    "NetworkNeighborhood",
    "NetworkNeighborhoodContainer",
    "NetworkPort",
    "network_neighborhoods_from_document",
]
