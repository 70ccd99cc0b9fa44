"""
FCM schedule operations.

CRUD for the caller's scheduled push messages.  The caller is
identified by ``ctx.user`` (Firebase uid) and ``ctx.project``
(Firebase project id); both are set by the transport after the ID
token has been checked.
"""

from __future__ import annotations

import sqlite3

from toolkit.core.errors import CronError
from toolkit.core.logging import get_logger
from toolkit.core.timestamps import utc_now
from toolkit.fcm.cron import decode_cron
from toolkit.fcm.repository import FcmSchedule, FcmScheduleRepository
from toolkit.ops.context import OperationContext
from toolkit.ops.requests import CreateFcmScheduleRequest, UpdateFcmScheduleRequest
from toolkit.ops.result import OperationResult, Stopwatch, start_timer

logger = get_logger(__name__)

SCHEDULE_NOT_FOUND = "Schedule not found"
INVALID_PAYLOAD = "Invalid payload"

# Top-level fields of an FCM v1 Message besides the target
_MESSAGE_FIELDS = frozenset({"notification", "data", "android", "webpush", "apns", "fcm_options"})


def _repo(ctx: OperationContext) -> FcmScheduleRepository:
    return FcmScheduleRepository(ctx.conn)


def _require_user(ctx: OperationContext, timer: Stopwatch) -> OperationResult | None:
    if not ctx.user:
        return timer.fail("UNAUTHORIZED", "Missing caller identity")
    return None


def _payload_warnings(payload: dict) -> list[str]:
    warnings = []
    if "token" in payload:
        warnings.append("payload.token is ignored; push_token is used as the target")
    unknown = sorted(set(payload) - _MESSAGE_FIELDS - {"token"})
    if unknown:
        warnings.append(f"payload has fields FCM does not accept: {', '.join(unknown)}")
    if not _MESSAGE_FIELDS & set(payload):
        warnings.append("payload has no notification or data; the device receives an empty message")
    return warnings


def _validate_fields(name: str, push_token: str, payload: object, timer: Stopwatch) -> OperationResult | None:
    if not isinstance(payload, dict):
        return timer.fail("VALIDATION_FAILED", INVALID_PAYLOAD)
    if not name or not name.strip():
        return timer.fail("VALIDATION_FAILED", "name is required")
    if not push_token or not push_token.strip():
        return timer.fail("VALIDATION_FAILED", "push_token is required")
    return None


def create_schedule(
    ctx: OperationContext,
    request: CreateFcmScheduleRequest,
) -> OperationResult[FcmSchedule]:
    """Create a schedule for the caller and return the stored row."""
    timer = start_timer()

    if (denied := _require_user(ctx, timer)) is not None:
        return denied
    if not ctx.project:
        return timer.fail("UNAUTHORIZED", "Invalid project id")
    if (invalid := _validate_fields(request.name, request.push_token, request.payload, timer)) is not None:
        return invalid

    now = utc_now()
    try:
        next_execution = decode_cron(request.cron_pattern, now)
    except CronError as exc:
        return timer.fail("VALIDATION_FAILED", exc.message)

    try:
        repo = _repo(ctx)
        schedule_id = repo.insert(
            name=request.name,
            fb_user_id=ctx.user,
            push_token=request.push_token,
            fb_project_id=ctx.project,
            cron_pattern=request.cron_pattern,
            payload=request.payload,
            next_execution=next_execution,
            now=now,
        )
        ctx.conn.commit()
        schedule = repo.get(schedule_id)
    except sqlite3.Error as exc:
        ctx.conn.rollback()
        logger.exception("fcm_schedule_create_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to create schedule: {exc}")

    if schedule is None:
        return timer.fail("INTERNAL", "Created schedule could not be read back")

    logger.info("fcm_schedule_created", schedule_id=schedule.id, next_execution=schedule.next_execution)
    return timer.ok(schedule, warnings=_payload_warnings(request.payload))


def list_schedules(ctx: OperationContext) -> OperationResult[list[FcmSchedule]]:
    """List the caller's schedules, oldest first."""
    timer = start_timer()

    if (denied := _require_user(ctx, timer)) is not None:
        return denied

    try:
        schedules = _repo(ctx).list_for_user(ctx.user)
    except sqlite3.Error as exc:
        logger.exception("fcm_schedule_list_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to list schedules: {exc}")

    return timer.ok(schedules)


def delete_schedule(ctx: OperationContext, schedule_id: int) -> OperationResult[FcmSchedule]:
    """Delete one of the caller's schedules and return it as it was."""
    timer = start_timer()

    if (denied := _require_user(ctx, timer)) is not None:
        return denied

    try:
        repo = _repo(ctx)
        schedule = repo.get_for_user(schedule_id, ctx.user)
        if schedule is None:
            return timer.fail("NOT_FOUND", SCHEDULE_NOT_FOUND)

        deleted = repo.delete_for_user(schedule_id, ctx.user)
        ctx.conn.commit()
    except sqlite3.Error as exc:
        ctx.conn.rollback()
        logger.exception("fcm_schedule_delete_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to delete schedule: {exc}")

    if deleted == 0:
        return timer.fail("NOT_FOUND", SCHEDULE_NOT_FOUND)

    logger.info("fcm_schedule_deleted", schedule_id=schedule_id)
    return timer.ok(schedule)


def update_schedule(
    ctx: OperationContext,
    request: UpdateFcmScheduleRequest,
) -> OperationResult[FcmSchedule]:
    """Replace name, push token, cron pattern and payload of a schedule.

    Ownership is checked before the body is validated, so callers probing
    other users' ids always get ``NOT_FOUND``.
    """
    timer = start_timer()

    if (denied := _require_user(ctx, timer)) is not None:
        return denied

    try:
        repo = _repo(ctx)
        if repo.get_for_user(request.schedule_id, ctx.user) is None:
            return timer.fail("NOT_FOUND", SCHEDULE_NOT_FOUND)
    except sqlite3.Error as exc:
        logger.exception("fcm_schedule_update_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to update schedule: {exc}")

    if (invalid := _validate_fields(request.name, request.push_token, request.payload, timer)) is not None:
        return invalid

    now = utc_now()
    try:
        next_execution = decode_cron(request.cron_pattern, now)
    except CronError as exc:
        return timer.fail("VALIDATION_FAILED", exc.message)

    try:
        updated = repo.update_for_user(
            request.schedule_id,
            ctx.user,
            name=request.name,
            push_token=request.push_token,
            cron_pattern=request.cron_pattern,
            payload=request.payload,
            next_execution=next_execution,
            now=now,
        )
        ctx.conn.commit()
        if updated == 0:
            return timer.fail("NOT_FOUND", SCHEDULE_NOT_FOUND)
        schedule = repo.get_for_user(request.schedule_id, ctx.user)
    except sqlite3.Error as exc:
        ctx.conn.rollback()
        logger.exception("fcm_schedule_update_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to update schedule: {exc}")

    if schedule is None:
        return timer.fail("NOT_FOUND", SCHEDULE_NOT_FOUND)

    logger.info("fcm_schedule_updated", schedule_id=schedule.id, next_execution=schedule.next_execution)
    return timer.ok(schedule, warnings=_payload_warnings(request.payload))


def list_all_schedules(ctx: OperationContext) -> OperationResult[list[FcmSchedule]]:
    """List every user's schedules, oldest first (operator use, CLI only)."""
    timer = start_timer()

    if ctx.caller == "api":
        return timer.fail("UNAUTHORIZED", "Not available over the API")

    try:
        schedules = _repo(ctx).list_all()
    except sqlite3.Error as exc:
        logger.exception("fcm_schedule_list_failed", error=str(exc))
        return timer.fail("INTERNAL", f"Failed to list schedules: {exc}")

    return timer.ok(schedules)
