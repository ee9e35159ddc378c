"""
RevokeActivationKeyCommand.
"""

from dataclasses import dataclass


@dataclass
class RevokeActivationKeyCommand:
    """Command to revoke an unused key."""

    key_id: int
