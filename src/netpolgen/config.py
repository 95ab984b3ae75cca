"""
Generator configuration.

Loaded from a YAML file or built in code; every field has a default so an
empty file is a valid configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml


class PolicyTypesMode(str, Enum):
    ALWAYS = "always"  # Ingress and Egress, even with no rules
    OBSERVED = "observed"  # only directions that produced rules


@dataclass
class GeneratorConfig:
    """Options for policy generation."""
    policy_types: PolicyTypesMode = PolicyTypesMode.ALWAYS
    generated_by: str = "kubescape"
    api_version: str = "spdx.softwarecomposition.kubescape.io/v1beta1"

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_types": self.policy_types.value,
            "generated_by": self.generated_by,
            "api_version": self.api_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GeneratorConfig:
        data = data or {}
        defaults = cls()
        try:
            mode = PolicyTypesMode(data.get("policy_types", defaults.policy_types.value))
        except ValueError:
            allowed = ", ".join(m.value for m in PolicyTypesMode)
            raise ValueError(
                f"invalid policy_types {data.get('policy_types')!r}, expected one of: {allowed}"
            ) from None
        return cls(
            policy_types=mode,
            generated_by=data.get("generated_by", defaults.generated_by),
            api_version=data.get("api_version", defaults.api_version),
        )


def load_config(path: str | Path) -> GeneratorConfig:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return GeneratorConfig.from_dict(data)
