"""
RedeemActivationKeyCommand.
"""

import uuid
from dataclasses import dataclass


@dataclass
class RedeemActivationKeyCommand:
    """Command to redeem a secret on behalf of the acting principal."""

    secret: str
    principal_id: uuid.UUID
