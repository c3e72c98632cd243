"""Calendar endpoints - GET /calendar/status, POST /calendar/refresh."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tpass.api.deps import get_calendar_service
from tpass.calendar.service import CalendarService, CalendarUnavailableError
from tpass.models.calendar import CalendarStatus

router = APIRouter(prefix="/calendar", tags=["calendar"])
logger = logging.getLogger(__name__)


@router.get("/status", response_model=CalendarStatus)
async def calendar_status(
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
) -> CalendarStatus:
    """Cache state, data quality, and years covered."""
    return calendar.status()


@router.post("/refresh", response_model=CalendarStatus)
async def calendar_refresh(
    calendar: Annotated[CalendarService, Depends(get_calendar_service)],
    year: Annotated[int | None, Query(ge=1900, le=2200)] = None,
) -> CalendarStatus:
    """Refetch one year of calendar data (default: current year).

    Raises:
        HTTPException: 503 if every provider failed
    """
    try:
        return await calendar.refresh(year)
    except CalendarUnavailableError as e:
        logger.error(f"[POST /calendar/refresh] year={e.year} failed: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Calendar data for {e.year} is unavailable",
        ) from e
