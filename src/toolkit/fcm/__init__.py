"""
Scheduled Firebase Cloud Messaging.

- :mod:`toolkit.fcm.claims`      Firebase ID token parsing / verification
- :mod:`toolkit.fcm.cron`        cron pattern evaluation
- :mod:`toolkit.fcm.repository`  ``fcm_schedule`` persistence
- :mod:`toolkit.fcm.accounts`    service-account registry
- :mod:`toolkit.fcm.messaging`   FCM HTTP v1 client
- :mod:`toolkit.fcm.dispatcher`  sends due schedules on each scheduler tick
"""
