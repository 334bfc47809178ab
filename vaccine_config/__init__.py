"""
vaccine_config -- single public entrypoint for inventory policy.

Responsibility:
    Provides ``get_active_policy()``, which resolves the policy file, parses
    it into an ``InventoryPolicy`` and emits a ``VACCINE_CONFIG_TRACE`` log
    record.  Services take the returned policy as a constructor argument;
    the kernel and engines never import this package.

Resolution order:
    1. The ``path`` argument.
    2. The ``VACCINE_POLICY_PATH`` environment variable.
    3. ``vaccine_config/sets/default.yaml``.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``ValueError`` -- the file parses but describes an invalid policy.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from vaccine_config.loader import compute_checksum, load_yaml_file, parse_policy
from vaccine_kernel.domain.policy import InventoryPolicy

_logger = logging.getLogger("vaccine_kernel.config")

POLICY_PATH_ENV = "VACCINE_POLICY_PATH"

_DEFAULT_POLICY_FILE = Path(__file__).parent / "sets" / "default.yaml"


def resolve_policy_path(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(POLICY_PATH_ENV)
    if env_path:
        return Path(env_path)
    return _DEFAULT_POLICY_FILE


def get_active_policy(path: Path | str | None = None) -> InventoryPolicy:
    """The public configuration entrypoint.

    Args:
        path: Optional override for the policy YAML file.

    Returns:
        The parsed, validated ``InventoryPolicy``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If the file describes an invalid policy.
    """
    policy_path = resolve_policy_path(path)
    data = load_yaml_file(policy_path)
    policy = parse_policy(data)

    _logger.info(
        "VACCINE_CONFIG_TRACE",
        extra={
            "trace_type": "VACCINE_CONFIG_TRACE",
            "policy_id": data.get("policy_id"),
            "policy_version": data.get("version"),
            "path": str(policy_path),
            "checksum": compute_checksum(data),
            **policy.to_dict(),
        },
    )
    return policy


__all__ = [
    "POLICY_PATH_ENV",
    "get_active_policy",
    "resolve_policy_path",
]
