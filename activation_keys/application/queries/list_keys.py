"""
ListActivationKeysQuery.
"""

from dataclasses import dataclass

from activation_keys.domain.key_store import DEFAULT_LIST_LIMIT


@dataclass
class ListActivationKeysQuery:
    """Query for the most recent keys, newest first."""

    limit: int = DEFAULT_LIST_LIMIT
