"""
Configuration for the nichejack engine.

Configuration is a plain dictionary merged over DEFAULT_CONFIG:

- dealer_hit_soft_17: dealer draws on a soft 17 (default True)
- session_ttl_seconds: idle seconds after which a session may be evicted,
  or None to keep sessions for the life of the process (default None)
- redact_deck: omit the undealt deck from snapshots (default False)
"""

import copy
from typing import Any, Dict, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    "dealer_hit_soft_17": True,
    "session_ttl_seconds": None,
    "redact_deck": False,
}


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge ``overrides`` over the defaults.

    Raises:
        ValueError: On unknown keys or out-of-range values
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not overrides:
        return config

    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    config.update(overrides)

    ttl = config["session_ttl_seconds"]
    if ttl is not None and ttl <= 0:
        raise ValueError("session_ttl_seconds must be positive or None")
    return config
