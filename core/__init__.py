"""
Core module shared by the key, group and account apps.

This module contains:
- Domain event base classes, exceptions and value objects
- The in-process event bus and its audit and metrics handlers
- Session, rate limit, metrics and observability middleware
- Health, readiness and metrics views
"""
