"""Request dependencies resolving the services built at startup."""

from fastapi import Request

from tpass.calendar.service import CalendarService
from tpass.pricing.comparison import FareComparisonService


def get_calendar_service(request: Request) -> CalendarService:
    """Calendar service owned by the running app."""
    return request.app.state.calendar_service


def get_comparison_service(request: Request) -> FareComparisonService:
    """Fare comparison service owned by the running app."""
    return request.app.state.comparison_service
