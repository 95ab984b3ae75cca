"""
Workload labels that are noise in peer selectors.

Revision hashes, generation counters and tooling markers change between
rollouts of the same workload; leaving them in a pod selector would make
the generated policy stop matching after the next deploy.
"""

from __future__ import annotations

IGNORED_LABELS = frozenset({
    "app.kubernetes.io/instance",
    "app.kubernetes.io/version",
    "app.kubernetes.io/managed-by",
    "app.kubernetes.io/created-by",
    "app.kubernetes.io/owner",
    "app.kubernetes.io/revision",
    "statefulset.kubernetes.io/pod-name",
    "scheduler.alpha.kubernetes.io/node-selector",
    "pod-template-hash",
    "controller-revision-hash",
    "pod-template-generation",
    "helm.sh/chart",
})

# Well-known keys that are deliberately kept. Same behavior as any unknown key.
KEPT_LABELS = frozenset({
    "app.kubernetes.io/name",
    "app.kubernetes.io/part-of",
    "app.kubernetes.io/component",
})


def is_ignored_label(key: str) -> bool:
    return key in IGNORED_LABELS


def remove_labels(labels: dict[str, str]) -> dict[str, str]:
    """Return a copy of `labels` without the ignored keys."""
    return {k: v for k, v in labels.items() if not is_ignored_label(k)}
