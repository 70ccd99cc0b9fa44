"""
Operations layer.

Every operation takes an :class:`OperationContext` first and returns an
:class:`OperationResult`; expected failures (not found, invalid cron,
bad payload) are returned, never raised.  The API and the CLI are thin
transports over these functions.
"""

from toolkit.ops.context import OperationContext
from toolkit.ops.result import OperationError, OperationResult

__all__ = ["OperationContext", "OperationError", "OperationResult"]
