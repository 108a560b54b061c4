from datetime import date
from typing import List, Optional
from app.config import settings

def current_academic_start(today: Optional[date] = None) -> int:
    """An academic year starts on 1 September."""
    today = today or date.today()
    return today.year if today.month >= 9 else today.year - 1

def get_academic_years(count: Optional[int] = None, today: Optional[date] = None) -> List[str]:
    """
    Academic years as "YYYY-YYYY+1", oldest first.
    Without `count`: everything from FIRST_ACADEMIC_YEAR to the year in progress.
    With `count`: the latest `count` years.
    """
    last = current_academic_start(today)
    if count is not None:
        first = last - max(1, count) + 1
    else:
        first = min(settings.FIRST_ACADEMIC_YEAR, last)
    return [f"{year}-{year + 1}" for year in range(first, last + 1)]
