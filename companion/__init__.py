"""
companion/__init__.py

Public interface for the companion module.

Usage
-----
    from companion import GuardianCore, Settings
"""

from companion.config import Settings
from companion.core import GuardianCore

__all__ = [
    # Primary entry point - this is what the UI calls
    "GuardianCore",
    "Settings",
]
