"""API routers: one module per domain, delegating to ``toolkit.ops``."""
