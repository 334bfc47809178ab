"""
vaccine_engines.tracer -- Engine invocation tracer emitting VACCINE_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    engine invocations with structured trace logging.  The trace captures
    engine_name, engine_version, input_fingerprint (SHA-256 prefix of the
    selected arguments), duration_ms and lot_count (size of the ``lots``
    argument when the engine takes one).

Invariants enforced:
    - Fingerprints are deterministic: dict keys are sorted, sequences keep
      their order, dates use ISO format.
    - The decorator only reads arguments and emits a log record; it never
      mutates inputs.

Usage:
    from vaccine_engines.tracer import traced_engine

    @traced_engine("classification", "1.0", fingerprint_fields=("now",))
    def alerts_for(lots, now):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable
from datetime import date
from enum import Enum
from typing import Any

# Engine tracer uses its own logger namespace to avoid importing kernel logging.
_logger = logging.getLogger("vaccine_kernel.engines.tracer")


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        items = sorted(value.items())
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """Compute a deterministic SHA-256 fingerprint of selected arguments.

    Missing fields are recorded as "null".  Returns a 16-character hex prefix.
    """
    parts: list[str] = []
    for field in fingerprint_fields:
        val = arguments.get(field)
        parts.append(f"{field}={_canonicalize(val)}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits VACCINE_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "classification").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names (positional or keyword) to
            include in the input fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            arguments = signature.bind_partial(*args, **kwargs).arguments
            fp = (
                compute_input_fingerprint(fingerprint_fields, arguments)
                if fingerprint_fields else ""
            )
            lots = arguments.get("lots")

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "VACCINE_ENGINE_TRACE",
                extra={
                    "trace_type": "VACCINE_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                    "lot_count": len(lots) if lots is not None else None,
                },
            )
            return result

        return wrapper

    return decorator
