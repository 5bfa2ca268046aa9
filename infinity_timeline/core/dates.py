import calendar
from datetime import date


def add_months(start: date, months: int) -> date:
    """
    Add calendar months to a date. The day is clamped to the last day of
    the target month (2024-01-31 + 1 month is 2024-02-29).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
