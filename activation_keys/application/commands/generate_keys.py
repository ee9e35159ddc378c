"""
GenerateActivationKeysCommand.

Command to mint a batch of activation keys.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GenerateActivationKeysCommand:
    """Command to mint ``count`` keys that each grant ``duration_days``."""

    duration_days: int
    count: int
    note: Optional[str] = None
