# Copyright (c) Syntropy Systems
"""Content fingerprints used to match checkpoints to configurations."""
from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from resweep.models.base import JSONValue
    from resweep.models.config import RunConfig


def fingerprint_text(blob: str | bytes) -> str:
    """Return the SHA-256 hex digest of a configuration blob."""
    data = blob.encode("utf-8") if isinstance(blob, str) else blob
    return hashlib.sha256(data).hexdigest()


def fingerprint_mapping(mapping: Mapping[str, JSONValue]) -> str:
    """Fingerprint a mapping through its canonical JSON form."""
    canonical = json.dumps(mapping, sort_keys=True, separators=(",", ":"))
    return fingerprint_text(canonical)


def config_fingerprint(config: RunConfig) -> str:
    """Fingerprint the parts of a run configuration that define the problem.

    Schedule, convergence, checkpoint and io settings are left out so
    that editing them does not invalidate an existing checkpoint.
    """
    return fingerprint_mapping(config.problem.model_dump(mode="json"))
