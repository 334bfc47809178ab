"""
Configuration Loader (``vaccine_config.loader``).

Responsibility
--------------
Loads a YAML policy file and parses it into an ``InventoryPolicy``.  The
public runtime entry point is ``vaccine_config.get_active_policy()``; this
module is the parsing half of it.

Invariants enforced
-------------------
* Every parsed policy is a frozen ``InventoryPolicy``.
* Keys under ``policy`` that ``InventoryPolicy`` does not define are
  rejected, never ignored.
* ``compute_checksum`` is deterministic for identical parsed content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Non-mapping ``policy`` section or unknown key  -> ``ValueError``.
* Out-of-range threshold  -> ``ValueError`` from ``InventoryPolicy``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from vaccine_kernel.domain.policy import InventoryPolicy

_POLICY_FIELDS = frozenset(f.name for f in dataclasses.fields(InventoryPolicy))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_policy(data: dict[str, Any]) -> InventoryPolicy:
    """
    Build an ``InventoryPolicy`` from a loaded document.

    Thresholds live under a ``policy`` mapping; any threshold left out
    keeps its default.
    """
    section = data.get("policy") or {}
    if not isinstance(section, dict):
        raise ValueError(
            f"'policy' must be a mapping, got {type(section).__name__}"
        )
    unknown = sorted(set(section) - _POLICY_FIELDS)
    if unknown:
        raise ValueError(f"Unknown policy keys: {', '.join(unknown)}")
    for key, value in section.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Policy key {key!r} must be an integer, got {value!r}")
    return InventoryPolicy.from_dict(section)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
