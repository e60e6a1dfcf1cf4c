"""
OrderDesk Bootstrap — Startup Errors
=====================================
If the store cannot be brought up, the application must not start.
"""


class SystemBootstrapError(Exception):
    """
    Raised when startup fails.

    If this exception is raised:
    - The application MUST NOT serve requests
    - No fallback to an unmigrated store
    """

    def __init__(self, stage: str, detail: str):
        self.stage = stage
        self.detail = detail
        super().__init__(f"OrderDesk bootstrap failure at {stage}: {detail}")
