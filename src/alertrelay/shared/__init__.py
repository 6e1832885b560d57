"""
Shared utilities and infrastructure components.

Logging setup and the exception hierarchy used across the relay.
"""
