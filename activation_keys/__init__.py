"""
Activation keys module - issuance, redemption and revocation.

This module handles:
- ActivationKey entity and its state machine
- KeyStore, KeyIssuer and KeyRedeemer domain services
- Activation key repository (port)
- Activation key infrastructure (Django ORM and in-memory adapters)
"""
