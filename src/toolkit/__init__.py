"""
toolkit - scheduled Firebase push notifications and remote browser automation.

Packages:
- toolkit.api: FastAPI application (routers, middleware, schemas)
- toolkit.ops: operation functions returning ``OperationResult``
- toolkit.fcm: schedules, cron, Firebase auth and FCM delivery
- toolkit.browser: remote Selenium session
- toolkit.deploy: CI workflow and compose descriptors
- toolkit.cli: Typer command line
"""

__version__ = "1.0.0"
