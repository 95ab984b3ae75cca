"""Errors raised while generating a network policy."""

from __future__ import annotations


class PolicyGenerationError(Exception):
    """Base class for precondition failures; no policy is produced."""

    def __init__(self, namespace: str, name: str, message: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"nn {namespace}/{name} {message}")


class NeighborhoodNotReadyError(PolicyGenerationError):
    def __init__(self, namespace: str, name: str):
        super().__init__(namespace, name, "status annotation is not ready nor completed")


class MissingWorkloadKindError(PolicyGenerationError):
    def __init__(self, namespace: str, name: str):
        super().__init__(namespace, name, "does not have a kind label")
