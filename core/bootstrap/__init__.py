"""
OrderDesk Bootstrap
====================
Brings the store up and wires the ledgers and services.
"""

from core.bootstrap.application import Application, build_application, get_application
from core.bootstrap.errors import SystemBootstrapError

__all__ = [
    "Application",
    "SystemBootstrapError",
    "build_application",
    "get_application",
]
