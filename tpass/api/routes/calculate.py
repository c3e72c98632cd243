"""Fare calculation endpoints - POST /calculate, POST /calculate/breakdown, GET /discounts."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

from tpass.api.deps import get_comparison_service
from tpass.calendar.service import CalendarUnavailableError
from tpass.models.fare import CalculationRequest, CrossMonthCalculation, FareComparison
from tpass.pricing.calculator import InvalidCalculationInputError
from tpass.pricing.comparison import FareComparisonService

router = APIRouter()
logger = logging.getLogger(__name__)


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, InvalidCalculationInputError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/calculate", response_model=FareComparison, status_code=status.HTTP_200_OK)
async def calculate(
    request: CalculationRequest,
    service: Annotated[FareComparisonService, Depends(get_comparison_service)],
) -> FareComparison:
    """Compare the monthly pass with per-trip fares for one pass period.

    Args:
        request: Start date, fare, trips per day, optional working-day override

    Returns:
        FareComparison with recommendation, monthly breakdown, and holidays

    Raises:
        HTTPException: 422 for out-of-range input, 503 if calendar data is unavailable
    """
    logger.info(f"[POST /calculate] start_date={request.start_date}")
    try:
        return await service.compare(request)
    except (InvalidCalculationInputError, CalendarUnavailableError) as e:
        logger.warning(f"[POST /calculate] rejected: {e}")
        raise _http_error(e) from e


@router.post(
    "/calculate/breakdown", response_model=CrossMonthCalculation, status_code=status.HTTP_200_OK
)
async def calculate_breakdown(
    request: CalculationRequest,
    service: Annotated[FareComparisonService, Depends(get_comparison_service)],
) -> CrossMonthCalculation:
    """Per-month discount breakdown for one pass period."""
    logger.info(f"[POST /calculate/breakdown] start_date={request.start_date}")
    try:
        return await service.breakdown(request)
    except (InvalidCalculationInputError, CalendarUnavailableError) as e:
        logger.warning(f"[POST /calculate/breakdown] rejected: {e}")
        raise _http_error(e) from e


@router.get("/discounts")
async def discounts(
    service: Annotated[FareComparisonService, Depends(get_comparison_service)],
) -> dict[str, Any]:
    """Frequent-rider discount tiers and monthly pass facts."""
    return service.discount_info()
