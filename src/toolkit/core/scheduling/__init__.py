"""
Background ticking for the FCM dispatcher.

The backend only decides *when* to tick; what a tick does (sending due
schedules) lives in :class:`toolkit.fcm.dispatcher.FcmDispatcher`.
"""

from toolkit.core.scheduling.thread_backend import SchedulerHealth, ThreadSchedulerBackend, TickCallback

__all__ = ["SchedulerHealth", "ThreadSchedulerBackend", "TickCallback"]
