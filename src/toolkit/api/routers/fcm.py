"""
Scheduled push notification router.

POST   /fcm/
GET    /fcm/
PUT    /fcm/{schedule_id}
DELETE /fcm/{schedule_id}

Every route requires ``firebase-auth: Bearer <Firebase ID token>`` and
only ever touches the caller's own schedules.
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Request

from toolkit.api.deps import FcmContext
from toolkit.api.schemas.common import SuccessResponse
from toolkit.api.schemas.fcm import FcmScheduleBody, FcmScheduleSchema
from toolkit.api.utils import as_dict, problem_from_result
from toolkit.ops import fcm as fcm_ops
from toolkit.ops.requests import CreateFcmScheduleRequest, UpdateFcmScheduleRequest

router = APIRouter(prefix="/fcm")


@router.post("/", response_model=SuccessResponse[FcmScheduleSchema], status_code=201)
def create_schedule(ctx: FcmContext, body: FcmScheduleBody, request: Request):
    """Create a scheduled push notification.

    ``next_execution`` is the first time the cron pattern fires after
    now; ``last_execution`` starts at the creation time.

    Raises:
        400 VALIDATION_FAILED: payload is not a JSON object, or invalid cron pattern.
        401 UNAUTHORIZED: missing/invalid token, or project not allowed.

    Example:
        POST /api/fcm/
        {"name": "standup", "push_token": "d9x...", "cron_pattern": "0 9 * * 1-5",
         "payload": {"notification": {"title": "Standup", "body": "in 5 minutes"}}}
    """
    result = fcm_ops.create_schedule(
        ctx,
        CreateFcmScheduleRequest(
            name=body.name,
            push_token=body.push_token,
            cron_pattern=body.cron_pattern,
            payload=body.payload,
        ),
    )
    if not result.success:
        return problem_from_result(result, request)
    return SuccessResponse(
        data=FcmScheduleSchema(**as_dict(result.data)),
        elapsed_ms=result.elapsed_ms,
        warnings=result.warnings,
    )


@router.get("/", response_model=SuccessResponse[list[FcmScheduleSchema]])
def list_schedules(ctx: FcmContext, request: Request):
    """List the caller's schedules, oldest first."""
    result = fcm_ops.list_schedules(ctx)
    if not result.success:
        return problem_from_result(result, request)
    return SuccessResponse(
        data=[FcmScheduleSchema(**as_dict(s)) for s in (result.data or [])],
        elapsed_ms=result.elapsed_ms,
        warnings=result.warnings,
    )


@router.put("/{schedule_id}", response_model=SuccessResponse[FcmScheduleSchema])
def update_schedule(
    ctx: FcmContext,
    body: FcmScheduleBody,
    request: Request,
    schedule_id: int = Path(..., description="Schedule ID"),
):
    """Replace a schedule's name, push token, cron pattern and payload.

    ``next_execution`` is recomputed from now.

    Raises:
        404 NOT_FOUND: no such schedule for this caller.
        400 VALIDATION_FAILED: bad payload or cron pattern.
    """
    result = fcm_ops.update_schedule(
        ctx,
        UpdateFcmScheduleRequest(
            schedule_id=schedule_id,
            name=body.name,
            push_token=body.push_token,
            cron_pattern=body.cron_pattern,
            payload=body.payload,
        ),
    )
    if not result.success:
        return problem_from_result(result, request)
    return SuccessResponse(
        data=FcmScheduleSchema(**as_dict(result.data)),
        elapsed_ms=result.elapsed_ms,
        warnings=result.warnings,
    )


@router.delete("/{schedule_id}", response_model=SuccessResponse[FcmScheduleSchema])
def delete_schedule(
    ctx: FcmContext,
    request: Request,
    schedule_id: int = Path(..., description="Schedule ID"),
):
    """Delete one of the caller's schedules and return it."""
    result = fcm_ops.delete_schedule(ctx, schedule_id)
    if not result.success:
        return problem_from_result(result, request)
    return SuccessResponse(
        data=FcmScheduleSchema(**as_dict(result.data)),
        elapsed_ms=result.elapsed_ms,
        warnings=result.warnings,
    )
