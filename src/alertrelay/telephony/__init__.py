"""
Telephony package.

Keep package import side-effects to a minimum; do not import the factory or
adapters here.
"""

__all__ = [
    "interface",
    "config",
    "factory",
]
