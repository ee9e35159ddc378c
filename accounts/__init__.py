"""
Accounts module - principals and their sessions.

This module handles:
- Principal entity (group membership, subscription expiry)
- Principal repository and subscription grantor (ports)
- Session tokens used to identify the acting principal
- Subscription expiry downgrades
"""
