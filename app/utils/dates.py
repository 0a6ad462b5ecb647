from datetime import date
from typing import Tuple

from app.core.errors import InvalidInput


def parse_month(month: str) -> Tuple[date, date]:
    """
    "2024-05" -> (date(2024, 5, 1), date(2024, 6, 1)).
    The second value is exclusive.
    """
    try:
        year_str, month_str = month.split("-")
        if len(year_str) != 4 or len(month_str) != 2:
            raise ValueError(month)
        start = date(int(year_str), int(month_str), 1)
    except (AttributeError, ValueError):
        raise InvalidInput(f"Invalid month {month!r}; expected YYYY-MM")

    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end
