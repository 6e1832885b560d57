"""
alertrelay: Alertmanager webhook relay with on-call phone escalation.
"""

__version__ = "0.1.0"
