"""Health check endpoints.

- /health always answers while the process is up
- /healthz reports the calendar component honestly
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from tpass.api.deps import get_calendar_service
from tpass.calendar.service import CalendarService
from tpass.models.calendar import ServiceState
from tpass.models.common import DataQuality

router = APIRouter()


def check_calendar(calendar: CalendarService) -> tuple[bool, str]:
    """Check calendar service readiness.

    Returns:
        (is_ready, status_message)
    """
    if calendar.state != ServiceState.ready:
        return (False, calendar.state.value)
    if calendar.quality == DataQuality.degraded:
        return (True, "degraded")
    return (True, "ok")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
) -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status once the calendar is ready (fresh or degraded)
        503 while the calendar service has not finished initializing
    """
    ready, calendar_status = check_calendar(calendar)

    response_body = {
        "status": "ok" if calendar_status == "ok" else "degraded",
        "components": {
            "calendar": calendar_status,
            "years_covered": calendar.years_covered,
        },
    }

    if not ready:
        import json

        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
