"""
OrderDesk Bootstrap — App Configuration
========================================
Brings the store up when Django finishes loading.

Rules:
- Runs once via ready()
- Skips management commands that manage the database themselves
- Skips under pytest; tests build their own application
- If startup fails → SystemBootstrapError prevents startup
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger("orderdesk.bootstrap")

SKIP_COMMANDS = {
    "migrate",
    "makemigrations",
    "showmigrations",
    "sqlmigrate",
    "flush",
    "shell",
    "dbshell",
    "inspectdb",
    "test",
    "check",
}


def _is_management_command_skip():
    if len(sys.argv) >= 2:
        return sys.argv[1] in SKIP_COMMANDS
    return False


def _is_pytest_context() -> bool:
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "pytest" in sys.modules
    )


class BootstrapConfig(AppConfig):
    name = "core.bootstrap"
    label = "bootstrap"
    verbose_name = "OrderDesk Bootstrap"

    def ready(self):
        if _is_management_command_skip() or _is_pytest_context():
            logger.info("Bootstrap skipped for management/test context.")
            return

        from core.bootstrap.application import get_application
        get_application()
