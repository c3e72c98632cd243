"""Named holidays inside a pass period, for display."""

from datetime import date, timedelta

from tpass.calendar.service import CalendarService
from tpass.models.calendar import HolidayDetail, HolidayDetails

# Indexed by date.weekday() (Monday = 0)
WEEKDAY_LABELS = ("一", "二", "三", "四", "五", "六", "日")


def extract_holiday_details(
    calendar_service: CalendarService, start: date, end: date
) -> HolidayDetails:
    """List every named holiday in [start, end], ascending.

    Plain weekends without a calendar entry are not holidays here.
    """
    holidays: list[HolidayDetail] = []
    current = start
    while current <= end:
        entry = calendar_service.get_entry(current)
        if entry is not None and entry.is_holiday and entry.name:
            holidays.append(
                HolidayDetail(
                    date=current,
                    name=entry.name,
                    day_of_week=WEEKDAY_LABELS[current.weekday()],
                    is_weekend=current.weekday() >= 5,
                )
            )
        current += timedelta(days=1)

    holidays.sort(key=lambda h: h.date)
    return HolidayDetails(total_holidays=len(holidays), holiday_list=holidays)
