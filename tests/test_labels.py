"""Tests for label sanitization."""

import pytest

from netpolgen.policy.labels import IGNORED_LABELS, KEPT_LABELS, is_ignored_label, remove_labels


class TestIgnoredLabels:
    @pytest.mark.parametrize("key", [
        "app.kubernetes.io/instance",
        "pod-template-hash",
        "controller-revision-hash",
        "helm.sh/chart",
        "statefulset.kubernetes.io/pod-name",
    ])
    def test_noisy_labels_ignored(self, key):
        assert is_ignored_label(key)

    def test_kept_labels_not_ignored(self):
        for key in KEPT_LABELS:
            assert not is_ignored_label(key)

    def test_unknown_label_not_ignored(self):
        assert not is_ignored_label("app")

    def test_tables_disjoint(self):
        assert not IGNORED_LABELS & KEPT_LABELS


class TestRemoveLabels:
    def test_remove_labels(self):
        labels = {
            "app.kubernetes.io/name": "value",
            "app.kubernetes.io/instance": "1234",
        }
        assert remove_labels(labels) == {"app.kubernetes.io/name": "value"}

    def test_input_not_modified(self):
        labels = {"pod-template-hash": "abc", "app": "web"}
        remove_labels(labels)
        assert labels == {"pod-template-hash": "abc", "app": "web"}

    def test_empty(self):
        assert remove_labels({}) == {}
