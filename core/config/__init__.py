"""
OrderDesk Core Config — Public API
===================================
Explicit application options. Nothing below the service layer reads
environment variables.
"""

from core.config.options import OrderDeskOptions

__all__ = [
    "OrderDeskOptions",
]
