"""
Access groups module - named tab permission sets.

This module handles:
- Group entity and the feature tabs it allows
- AccessGate, which answers tab checks for a principal
- GroupRegistry for editing groups and memberships
"""
