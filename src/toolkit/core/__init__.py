"""
Core primitives for toolkit: logging, errors, timestamps, database access,
schema migrations, health checks and the scheduler backend.
"""
